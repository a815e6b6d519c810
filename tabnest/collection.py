from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

from tabnest.config import EXPANDABLE_PARAMS, PAGINATION_POSITIONS
from tabnest.errors import InvalidCombination
from tabnest.items import ContentItem, pagination_marker, parse_tab_path


@dataclass
class Collection:
    """Ordered, combinable accumulation of content items.

    `labels` maps tab path segments to display labels. `defaults` is overlaid
    onto every dict payload appended afterwards (explicit payload keys win).
    """

    items: List[ContentItem] = field(default_factory=list)
    labels: Dict[str, str] = field(default_factory=dict)
    defaults: Dict[str, Any] = field(default_factory=dict)
    next_index: int = 1

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[ContentItem]:
        return iter(self.items)

    def __add__(self, other: Any) -> "Collection":
        if not is_collection(other) and not is_item(other):
            raise InvalidCombination(f"cannot add {type(other).__name__} to a Collection")
        return combine(self, other)

    def add(
        self,
        payload: Any = None,
        *,
        tab_path: Any = None,
        filter: Any = None,
        title_tabset: Optional[str] = None,
        **params: Any,
    ) -> "Collection":
        if params:
            if payload is not None and not isinstance(payload, Mapping):
                raise TypeError("keyword parameters can only be merged into a dict payload")
            payload = {**(payload or {}), **params}
        item = ContentItem(
            tab_path=parse_tab_path(tab_path),
            filter=filter,
            title_tabset=title_tabset,
            payload=payload,
        )
        return append(self, item)

    def add_text(self, *lines: str, tab_path: Any = None, filter: Any = None, title_tabset: Optional[str] = None) -> "Collection":
        item = text_item(*lines, tab_path=tab_path)
        item.filter = filter
        item.title_tabset = title_tabset
        return append(self, item)

    def add_many(
        self,
        *,
        tab_path: Any = None,
        tab_paths: Optional[Sequence[Any]] = None,
        tab_path_template: Optional[str] = None,
        title_template: Optional[str] = None,
        filter: Any = None,
        title_tabset: Optional[str] = None,
        **params: Any,
    ) -> "Collection":
        """Add one item per element of the list-valued expandable parameters.

        ``add_many(x_var=["age", "income"], tab_path_template="demo/{x_var}")``
        adds two items under ``demo/age`` and ``demo/income``.
        """
        vector_params = [
            name
            for name in EXPANDABLE_PARAMS
            if isinstance(params.get(name), (list, tuple)) and len(params[name]) > 1
        ]
        if not vector_params:
            raise ValueError(
                "No expandable parameters found with more than one value. "
                f"Use add() for single items. Expandable parameters: {', '.join(EXPANDABLE_PARAMS)}"
            )
        n = len(params[vector_params[0]])
        lengths = {name: len(params[name]) for name in vector_params}
        if any(length != n for length in lengths.values()):
            found = ", ".join(f"{name} = {length}" for name, length in lengths.items())
            raise ValueError(f"All expandable parameters must have the same length. Found: {found}")
        if tab_paths is not None and len(tab_paths) != n:
            raise ValueError(f"tab_paths has {len(tab_paths)} entries, expected {n}")

        for i in range(n):
            iter_params = {name: (value[i] if name in vector_params else value) for name, value in params.items()}
            iter_path = tab_path
            if tab_path_template is not None:
                iter_path = tab_path_template.format(i=i + 1, **iter_params)
            elif tab_paths is not None:
                iter_path = tab_paths[i]
            if title_template is not None:
                iter_params["title"] = title_template.format(i=i + 1, **iter_params)
            self.add(iter_params, tab_path=iter_path, filter=filter, title_tabset=title_tabset)
        return self

    def add_pagination(self, position: str = "bottom", separator: Optional[str] = None) -> "Collection":
        if position not in PAGINATION_POSITIONS:
            raise ValueError(f"position must be one of {', '.join(PAGINATION_POSITIONS)}; got {position!r}")
        return append(self, pagination_marker(position=position, separator=separator))

    def set_labels(self, labels: Mapping[str, str]) -> "Collection":
        self.labels.update({str(k): str(v) for k, v in labels.items()})
        return self


def is_collection(value: Any) -> bool:
    return isinstance(value, Collection)


def is_item(value: Any) -> bool:
    return isinstance(value, ContentItem)


def create_collection(labels: Optional[Mapping[str, str]] = None, **defaults: Any) -> Collection:
    return Collection(labels=dict(labels or {}), defaults=dict(defaults))


def text_item(*lines: str, tab_path: Any = None) -> ContentItem:
    content = "\n".join(str(line) for line in lines)
    return ContentItem(tab_path=parse_tab_path(tab_path), payload={"type": "text", "content": content})


def _overlay(defaults: Mapping[str, Any], payload: Any) -> Any:
    if not defaults:
        return payload
    if payload is None:
        return dict(defaults)
    if isinstance(payload, Mapping):
        return {**defaults, **payload}
    return payload


def append(collection: Collection, item: ContentItem) -> Collection:
    if not is_collection(collection):
        raise InvalidCombination(f"append() needs a Collection, got {type(collection).__name__}")
    if not is_item(item):
        raise InvalidCombination(f"append() needs a ContentItem, got {type(item).__name__}")
    path = parse_tab_path(item.tab_path)
    payload = item.payload if item.is_marker else _overlay(collection.defaults, item.payload)
    stored = replace(
        item,
        tab_path=path,
        payload=payload,
        insertion_index=collection.next_index,
        nested_children=[],
    )
    collection.items.append(stored)
    collection.next_index += 1
    return collection


def combine(*parts: Any) -> Collection:
    """Concatenate collections (or bare items) into a new collection.

    Items are renumbered 1..n in concatenation order; labels and defaults are
    merged left to right with later arguments winning.
    """
    items: List[ContentItem] = []
    labels: Dict[str, str] = {}
    defaults: Dict[str, Any] = {}
    for pos, part in enumerate(parts, start=1):
        if is_collection(part):
            part_items = part.items
            labels.update(part.labels)
            defaults.update(part.defaults)
        elif is_item(part):
            part_items = [part]
        else:
            raise InvalidCombination(
                f"argument {pos} to combine() must be a Collection or ContentItem, got {type(part).__name__}"
            )
        for item in part_items:
            items.append(
                replace(
                    item,
                    tab_path=parse_tab_path(item.tab_path),
                    insertion_index=len(items) + 1,
                    nested_children=[],
                )
            )
    return Collection(items=items, labels=labels, defaults=defaults, next_index=len(items) + 1)
