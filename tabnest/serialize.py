from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from tabnest.charts import encode_payload
from tabnest.config import BuildOptions
from tabnest.items import ContentItem, TabGroupNode, TreeChild
from tabnest.signature import signature


@dataclass(frozen=True)
class OpenTab:
    name: str
    label: str
    depth: int


@dataclass(frozen=True)
class CloseTab:
    name: str
    depth: int


@dataclass(frozen=True)
class RenderPayload:
    item: ContentItem
    depth: int


Event = Union[OpenTab, CloseTab, RenderPayload]


def serialize(tree: TabGroupNode) -> List[Event]:
    """Depth-first event stream for a finalized tree.

    The node passed in is the implicit root and emits no events of its own;
    its direct children sit at depth 1. Container items open a tab labelled
    with their `title_tabset` (or the enclosing group's label) and never emit
    `RenderPayload`.
    """
    events: List[Event] = []
    _walk(tree.children, 1, tree.label, events)
    return events


def _walk(children: List[TreeChild], depth: int, group_label: str, events: List[Event]) -> None:
    for child in children:
        if isinstance(child, TabGroupNode):
            events.append(OpenTab(child.name, child.label, depth))
            _walk(child.children, depth + 1, child.label, events)
            events.append(CloseTab(child.name, depth))
        elif child.is_container:
            name = child.tab_path[-1] if child.tab_path else ""
            label = child.title_tabset or group_label or name
            events.append(OpenTab(name, label, depth))
            _walk(child.nested_children, depth + 1, label, events)
            events.append(CloseTab(name, depth))
        else:
            events.append(RenderPayload(child, depth))


def heading_level(depth: int, options: Optional[BuildOptions] = None) -> int:
    options = options or BuildOptions()
    return min(6, options.base_heading_level + depth - 1)


def item_to_dict(item: ContentItem, payload_encoder: Callable[[Any], Any] = encode_payload) -> Dict[str, Any]:
    return {
        "insertion_index": item.insertion_index,
        "kind": item.kind,
        "tab_path": list(item.tab_path),
        "title_tabset": item.title_tabset,
        "filter": None if item.filter is None else str(signature(item.filter)),
        "payload": payload_encoder(item.payload),
    }


def tree_to_dict(node: TreeChild, payload_encoder: Callable[[Any], Any] = encode_payload) -> Dict[str, Any]:
    if isinstance(node, TabGroupNode):
        return {
            "type": "tab_group",
            "name": node.name,
            "label": node.label,
            "children": [tree_to_dict(child, payload_encoder) for child in node.children],
        }
    out = item_to_dict(node, payload_encoder)
    if node.is_container:
        out["type"] = "container"
        out["payload"] = None
        out["children"] = [tree_to_dict(child, payload_encoder) for child in node.nested_children]
    else:
        out["type"] = "leaf"
    return out


def event_to_dict(
    event: Event,
    options: Optional[BuildOptions] = None,
    payload_encoder: Callable[[Any], Any] = encode_payload,
) -> Dict[str, Any]:
    level = heading_level(event.depth, options)
    if isinstance(event, OpenTab):
        return {"event": "open_tab", "name": event.name, "label": event.label, "depth": event.depth, "heading_level": level}
    if isinstance(event, CloseTab):
        return {"event": "close_tab", "name": event.name, "depth": event.depth, "heading_level": level}
    return {
        "event": "render",
        "depth": event.depth,
        "heading_level": level,
        "item": item_to_dict(event.item, payload_encoder),
    }
