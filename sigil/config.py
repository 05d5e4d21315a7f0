"""
Parser configuration.

Options are plain dicts: callers pass only the keys they care about and
`resolve_config` fills in the rest from the defaults.
"""

from typing import Optional, TypedDict


class ParserConfig(TypedDict, total=False):
    max_block_depth: int
    max_annotation_depth: Optional[int]


class ParserConfigRequired(TypedDict):
    max_block_depth: int
    max_annotation_depth: Optional[int]


# Blocks recurse (a few frames per level), so this stays well under the
# interpreter's recursion limit. Annotations use an explicit stack and are
# unbounded unless a limit is given.
DEFAULT_PARSER_CONFIG: ParserConfigRequired = {
    "max_block_depth": 128,
    "max_annotation_depth": None,
}


def resolve_config(config: ParserConfig, default_config: ParserConfigRequired) -> ParserConfigRequired:
    _config = default_config.copy()
    if config:
        unknown = set(config) - set(_config)
        if unknown:
            raise ValueError(f"Unknown parser option(s): {', '.join(sorted(unknown))}")
        for key in _config:
            if key in config:
                _config[key] = config[key]  # type: ignore[literal-required]
    return _config
