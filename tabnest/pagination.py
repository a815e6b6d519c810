from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Union

from tabnest.collection import Collection
from tabnest.items import ContentItem


@dataclass
class PageSection:
    items: List[ContentItem] = field(default_factory=list)
    page_index: int = 1
    total_pages: int = 1
    marker_after: Optional[ContentItem] = None

    @property
    def is_first(self) -> bool:
        return self.page_index == 1

    @property
    def is_last(self) -> bool:
        return self.page_index == self.total_pages


def _as_items(items: Union[Collection, Iterable[ContentItem]]) -> List[ContentItem]:
    if isinstance(items, Collection):
        return list(items.items)
    return list(items)


def has_pagination_markers(items: Union[Collection, Iterable[ContentItem]]) -> bool:
    return any(item.pagination_break for item in _as_items(items))


def split_pages(items: Union[Collection, Iterable[ContentItem]]) -> List[PageSection]:
    """Cut a flat item list into page sections at pagination markers.

    Markers are not part of any section. Sections that would be empty (leading,
    doubled or trailing markers) are not emitted; an empty input still gives one
    empty page so callers always have something to render.
    """
    sections: List[PageSection] = []
    current: List[ContentItem] = []
    for item in _as_items(items):
        if item.pagination_break:
            if current:
                sections.append(PageSection(items=current, marker_after=item))
                current = []
            continue
        current.append(item)
    if current or not sections:
        sections.append(PageSection(items=current))

    total = len(sections)
    for idx, section in enumerate(sections, start=1):
        section.page_index = idx
        section.total_pages = total
    return sections


def page_label(section: PageSection, separator: str = "of") -> str:
    return f"{section.page_index} {separator} {section.total_pages}"


def page_slug(base: str, page_index: int) -> str:
    return base if page_index <= 1 else f"{base}_p{page_index}"
