from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from tabnest.config import PATH_SEPARATOR
from tabnest.errors import MalformedPath


CONTENT = "content"
PAGINATION = "pagination"


@dataclass
class ContentItem:
    kind: str = CONTENT
    tab_path: Tuple[str, ...] = ()
    filter: Any = None
    insertion_index: int = 0
    title_tabset: Optional[str] = None
    pagination_break: bool = False
    payload: Any = None
    nested_children: List["TreeChild"] = field(default_factory=list)

    @property
    def is_marker(self) -> bool:
        return self.pagination_break

    @property
    def is_container(self) -> bool:
        return bool(self.nested_children)

    @property
    def is_leaf(self) -> bool:
        return not self.nested_children

    @property
    def title(self) -> Optional[str]:
        if isinstance(self.payload, Mapping):
            return self.payload.get("title")
        return None


@dataclass
class TabGroupNode:
    name: str
    label: str = ""
    children: List["TreeChild"] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.label:
            self.label = self.name


TreeChild = Union[ContentItem, TabGroupNode]


def pagination_marker(position: str = "bottom", separator: Optional[str] = None) -> ContentItem:
    return ContentItem(
        kind=PAGINATION,
        pagination_break=True,
        payload={"position": position, "separator": separator},
    )


def validate_tab_path(path: Iterable[Any], *, max_depth: Optional[int] = None) -> Tuple[str, ...]:
    if isinstance(path, str):
        raise MalformedPath(f"tab path {path!r} is a bare string; use parse_tab_path() for slash notation")
    segments = tuple(path)
    for seg in segments:
        if not isinstance(seg, str):
            raise MalformedPath(f"tab path segments must be strings, got {type(seg).__name__} in {segments!r}")
        if not seg.strip():
            raise MalformedPath(f"tab path {segments!r} contains an empty segment")
    if max_depth is not None and len(segments) > max_depth:
        raise MalformedPath(f"tab path {'/'.join(segments)!r} is deeper than {max_depth} levels")
    return segments


def parse_tab_path(value: Any, separator: str = PATH_SEPARATOR) -> Tuple[str, ...]:
    """Normalize a tab path given as a slash string, a sequence, or a level mapping.

    ``"sis/age/item1"``, ``["sis", "age", "item1"]`` and
    ``{"1": "sis", "2": "age", "3": "item1"}`` all give ``("sis", "age", "item1")``.
    None means top level.
    """
    if value is None:
        return ()
    if isinstance(value, str):
        return validate_tab_path(part.strip() for part in value.split(separator))
    if isinstance(value, Mapping):
        keys = [str(k) for k in value.keys()]
        if not all(re.fullmatch(r"\d+", k) for k in keys):
            raise MalformedPath(f"tab path mapping keys must be level numbers, got {keys!r}")
        ordered = sorted(value.items(), key=lambda kv: int(str(kv[0])))
        return validate_tab_path(str(v).strip() for _, v in ordered)
    if isinstance(value, (list, tuple)):
        return validate_tab_path(s.strip() if isinstance(s, str) else s for s in value)
    raise MalformedPath(f"tab path must be a string, sequence or level mapping, got {type(value).__name__}")
