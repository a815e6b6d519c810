from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


PATH_SEPARATOR = "/"
UNRESOLVED_POLICIES = ("shared", "earliest")
PAGINATION_POSITIONS = ("top", "bottom", "both")

# Parameters that add_many() expands when given as a list.
EXPANDABLE_PARAMS = (
    "response_var",
    "x_var",
    "y_var",
    "stack_var",
    "questions",
    "group_var",
    "title",
)


@dataclass(frozen=True)
class BuildOptions:
    max_path_depth: int = 16
    base_heading_level: int = 2
    pagination_separator: str = "of"
    unresolved_policy: str = "shared"


def normalize_options(raw: Optional[dict]) -> BuildOptions:
    raw = raw or {}

    max_path_depth = raw.get("max_path_depth", 16)
    try:
        max_path_depth = int(max_path_depth)
    except Exception:
        max_path_depth = 16
    max_path_depth = max(1, min(16, max_path_depth))

    base_heading_level = raw.get("base_heading_level", 2)
    try:
        base_heading_level = int(base_heading_level)
    except Exception:
        base_heading_level = 2
    base_heading_level = max(1, min(6, base_heading_level))

    pagination_separator = str(raw.get("pagination_separator") or "of").strip() or "of"

    unresolved_policy = str(raw.get("unresolved_policy") or "shared").strip().lower()
    if unresolved_policy not in UNRESOLVED_POLICIES:
        unresolved_policy = "shared"

    return BuildOptions(
        max_path_depth=max_path_depth,
        base_heading_level=base_heading_level,
        pagination_separator=pagination_separator,
        unresolved_policy=unresolved_policy,
    )
