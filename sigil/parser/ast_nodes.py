"""
Syntax tree node definitions for sigil markup.

Every node is a frozen dataclass, so a parsed tree is never mutated after
construction and no node is shared between parents. Nodes carry an
optional source span that is left out of equality and repr: two trees
compare equal when their structure and text match, wherever they came from.

Sum types are plain unions (`Element`, `Entity`); consumers dispatch with
isinstance checks.

Author: xwest
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Iterator, List, Optional, Tuple, TypeVar, Union

from ..lexer.tokens import SourceSpan


class Delimiter(Enum):
    """Which brackets enclose an annotation."""
    PAREN = "Paren"
    BRACKET = "Bracket"


class BlockStyle(Enum):
    """How the extent of a block is closed."""
    DELIMITED = "Delimited"     # @name( ... )
    INCONTEXT = "Incontext"     # @name ... @end
    BRACED = "Braced"           # @name{ ... }


# ============================================================================
# Annotations
# ============================================================================

@dataclass(frozen=True)
class Atom:
    """Literal text, exactly as written in the source."""
    content: str
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)

    def children(self) -> List['Node']:
        return []


@dataclass(frozen=True)
class Annotation:
    """A bracketed, arbitrarily nested list of atoms and annotations."""
    delimiter: Delimiter
    elements: Tuple['Element', ...] = ()
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)

    def children(self) -> List['Node']:
        return list(self.elements)


Element = Union[Atom, Annotation]


# ============================================================================
# Entities
# ============================================================================

@dataclass(frozen=True)
class Raw:
    """Prose, the verbatim source substring."""
    content: str
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)

    def children(self) -> List['Node']:
        return []


@dataclass(frozen=True)
class IncontextAnnotation:
    """An annotation that is not attached to any item, blob or block."""
    annotation: Annotation

    def children(self) -> List['Node']:
        return [self.annotation]


@dataclass(frozen=True)
class Item:
    """`@@name(payload)`"""
    name: Atom
    annotation: Annotation
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)

    def children(self) -> List['Node']:
        return [self.name, self.annotation]


@dataclass(frozen=True)
class Blob:
    """Verbatim text between two fences of equal width."""
    content: str
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)

    def children(self) -> List['Node']:
        return []


@dataclass(frozen=True)
class Block:
    """A named block whose body is another document."""
    style: BlockStyle
    name: Atom
    top: 'Top'
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)

    def children(self) -> List['Node']:
        return [self.name, self.top]


Inner = TypeVar('Inner', Item, Blob, Block)


@dataclass(frozen=True)
class Annotated(Generic[Inner]):
    """An item, blob or block with the annotations that preceded it."""
    attached: Tuple[Annotation, ...]
    inner: Inner

    def children(self) -> List['Node']:
        return [*self.attached, self.inner]


Entity = Union[Raw, IncontextAnnotation, Annotated]


@dataclass(frozen=True)
class Top:
    """A document, or the body of a block."""
    entities: Tuple[Entity, ...] = ()

    def children(self) -> List['Node']:
        return list(self.entities)


Node = Union[Atom, Annotation, Raw, IncontextAnnotation, Item, Blob, Block, Annotated, Top]


def walk(node: Node) -> Iterator[Node]:
    """
    Yield `node` and all of its descendants in pre-order.

    Uses an explicit stack, so arbitrarily deep trees are fine.
    """
    stack: List[Node] = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children()))


def depth(node: Node) -> int:
    """Number of nested annotation and block levels, counting `node` itself."""
    deepest = 0
    stack: List[Tuple[Node, int]] = [(node, 0)]
    while stack:
        current, level = stack.pop()
        if isinstance(current, (Annotation, Block)):
            level += 1
        deepest = max(deepest, level)
        for child in current.children():
            stack.append((child, level))
    return deepest
