"""Tab hierarchy builder.

Turns the items of one page section into a tree of `TabGroupNode`s and
`ContentItem`s. Items whose path ends at segment `s` are *leaf slots* of the
tab group `s`. Several leaf slots may share a path and are told apart only by
their filter (e.g. one tab per survey wave). A deeper item under `s` is
attached to the leaf slot with the same filter signature, which turns that
item into a container: it stops rendering its own payload and renders the
nested tabs instead.

Lookups go through a registry keyed by (scoped path, signature). The scope of
a key includes the identity of every container on the way down, so
equal paths under different branches never collide.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Tuple, Union

from tabnest.collection import Collection
from tabnest.config import BuildOptions
from tabnest.errors import UnresolvedAttachment
from tabnest.items import ContentItem, TabGroupNode, TreeChild, parse_tab_path, validate_tab_path
from tabnest.pagination import PageSection, split_pages
from tabnest.signature import FilterSignature, signature


logger = logging.getLogger(__name__)

ScopeKey = Tuple[Union[str, int], ...]


def _group(children: List[TreeChild], name: str) -> TabGroupNode:
    for child in children:
        if isinstance(child, TabGroupNode) and child.name == name:
            return child
    group = TabGroupNode(name=name)
    children.append(group)
    return group


class HierarchyBuilder:
    def __init__(self, labels: Optional[Dict[str, str]] = None, options: Optional[BuildOptions] = None):
        self.labels = dict(labels or {})
        self.options = options or BuildOptions()
        self.root = TabGroupNode(name="")
        self.unresolved: List[UnresolvedAttachment] = []
        self._slots: Dict[Tuple[ScopeKey, FilterSignature], ContentItem] = {}
        self._slot_items: Dict[ScopeKey, List[ContentItem]] = {}

    def insert(self, item: ContentItem) -> Optional[ContentItem]:
        """Place one item; returns the tree's copy of it (None for markers)."""
        if item.pagination_break:
            logger.debug("skipping pagination marker #%s inside a page section", item.insertion_index)
            return None
        # validate before touching the tree: an item is placed whole or not at all
        path = validate_tab_path(parse_tab_path(item.tab_path), max_depth=self.options.max_path_depth)
        sig = signature(item.filter)
        node = replace(item, tab_path=path, nested_children=[])
        self._insert(self.root.children, (), path, node, sig)
        return node

    def _insert(
        self,
        children: List[TreeChild],
        scope: ScopeKey,
        path: Tuple[str, ...],
        item: ContentItem,
        sig: FilterSignature,
    ) -> None:
        if not path:
            children.append(item)
            return

        seg, rest = path[0], path[1:]
        slot_key = scope + (seg,)
        if not rest:
            _group(children, seg).children.append(item)
            self._slots.setdefault((slot_key, sig), item)
            self._slot_items.setdefault(slot_key, []).append(item)
            return

        owner = self._slots.get((slot_key, sig))
        if owner is None and slot_key in self._slot_items:
            owner = self._unresolved(item, seg, sig, slot_key)
        if owner is not None:
            self._insert(owner.nested_children, slot_key + (id(owner),), rest, item, sig)
            return
        self._insert(_group(children, seg).children, slot_key, rest, item, sig)

    def _unresolved(
        self, item: ContentItem, seg: str, sig: FilterSignature, slot_key: ScopeKey
    ) -> Optional[ContentItem]:
        policy = self.options.unresolved_policy
        record = UnresolvedAttachment(
            item_index=item.insertion_index,
            tab_path=item.tab_path,
            segment=seg,
            signature=str(sig),
            policy=policy,
        )
        self.unresolved.append(record)
        logger.warning(
            "item #%s (%s) has no branch with filter %s under %r; using %s fallback",
            item.insertion_index,
            "/".join(item.tab_path),
            sig,
            seg,
            policy,
        )
        if policy == "earliest":
            return self._slot_items[slot_key][0]
        return None

    def finalize(self) -> TabGroupNode:
        _finalize_children(self.root.children, self.labels)
        logger.debug(
            "built tab tree with %d top-level nodes (%d unresolved)", len(self.root.children), len(self.unresolved)
        )
        return self.root


def _finalize_children(children: List[TreeChild], labels: Dict[str, str]) -> float:
    """Resolve labels and sort siblings by the earliest index in their subtree."""
    keyed = []
    for child in children:
        if isinstance(child, TabGroupNode):
            child.label = labels.get(child.name, child.name)
            low = _finalize_children(child.children, labels)
        else:
            low = min(child.insertion_index, _finalize_children(child.nested_children, labels))
        keyed.append((low, child))
    keyed.sort(key=lambda pair: pair[0])
    children[:] = [child for _, child in keyed]
    return keyed[0][0] if keyed else math.inf


def build_tree(
    section: Union[PageSection, Collection, Iterable[ContentItem]],
    labels: Optional[Dict[str, str]] = None,
    options: Optional[BuildOptions] = None,
) -> TabGroupNode:
    if isinstance(section, PageSection):
        items = section.items
    elif isinstance(section, Collection):
        items = section.items
        labels = section.labels if labels is None else labels
    else:
        items = list(section)
    builder = HierarchyBuilder(labels, options)
    for item in items:
        builder.insert(item)
    return builder.finalize()


def build_page_trees(
    collection: Collection, options: Optional[BuildOptions] = None
) -> List[Tuple[PageSection, HierarchyBuilder]]:
    """Split a collection into pages and build one finalized tree per page."""
    out = []
    for section in split_pages(collection):
        builder = HierarchyBuilder(collection.labels, options)
        for item in section.items:
            builder.insert(item)
        builder.finalize()
        out.append((section, builder))
    return out
