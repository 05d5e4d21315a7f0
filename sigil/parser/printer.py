"""
Text rendering of parsed trees, one entity per line.

Annotations print back in their bracket notation; prose and blobs print as
Python string literals so whitespace stays visible. Both functions walk
with explicit stacks, so deeply nested input prints without recursion.
"""

from typing import List, Tuple, Union

from .ast_nodes import Annotated, Annotation, Atom, Blob, Block, Delimiter, IncontextAnnotation, Item, Raw, Top

OPEN = {Delimiter.PAREN: "(", Delimiter.BRACKET: "["}
CLOSE = {Delimiter.PAREN: ")", Delimiter.BRACKET: "]"}


def format_annotation(annotation: Annotation) -> str:
    """Render an annotation as `(a [b c])`."""
    out = [OPEN[annotation.delimiter]]
    stack: List[Tuple[Annotation, int]] = [(annotation, 0)]

    while stack:
        node, index = stack.pop()
        if index == len(node.elements):
            out.append(CLOSE[node.delimiter])
            continue
        if index:
            out.append(" ")
        stack.append((node, index + 1))

        element = node.elements[index]
        if isinstance(element, Atom):
            out.append(element.content)
        else:
            out.append(OPEN[element.delimiter])
            stack.append((element, 0))

    return "".join(out)


def format_tree(node: Union[Top, Annotation], indent: str = "  ") -> str:
    """
    Render a document as an indented outline.

        Top
          Block block [Incontext]
            IncontextAnnotation (never gonna [give (you up)])
            Raw 'Is there life on Mars?\\n'

    Attached annotations are listed under the entity they belong to.
    """
    if isinstance(node, Annotation):
        return format_annotation(node)

    lines: List[str] = []
    stack: List[Tuple[object, int]] = [(node, 0)]

    while stack:
        current, level = stack.pop()
        pad = indent * level
        children: List[Tuple[object, int]] = []

        if isinstance(current, Top):
            lines.append(f"{pad}Top")
            children = [(entity, level + 1) for entity in current.entities]
        elif isinstance(current, Raw):
            lines.append(f"{pad}Raw {current.content!r}")
        elif isinstance(current, IncontextAnnotation):
            lines.append(f"{pad}IncontextAnnotation {format_annotation(current.annotation)}")
        elif isinstance(current, Annotated):
            inner = current.inner
            if isinstance(inner, Item):
                lines.append(f"{pad}Item {inner.name.content} {format_annotation(inner.annotation)}")
            elif isinstance(inner, Blob):
                lines.append(f"{pad}Blob {inner.content!r}")
            elif isinstance(inner, Block):
                lines.append(f"{pad}Block {inner.name.content} [{inner.style.value}]")
                children = [(entity, level + 1) for entity in inner.top.entities]
            else:
                raise TypeError(f"Cannot format annotated {type(inner).__name__}")
            for annotation in current.attached:
                lines.append(f"{pad}{indent}attached {format_annotation(annotation)}")
        else:
            raise TypeError(f"Cannot format {type(current).__name__}")

        stack.extend(reversed(children))

    return "\n".join(lines)
