from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


class TabnestError(Exception):
    """Base class for layout errors."""


class InvalidCombination(TabnestError, TypeError):
    """An operand of append/combine is not a collection or content item."""


class MalformedPath(TabnestError, ValueError):
    """A tab path has an empty or non-string segment, or is too deep.

    The depth limit is `BuildOptions.max_path_depth` (16 levels by default)
    and is only checked when a tree is built.
    """


@dataclass(frozen=True)
class UnresolvedAttachment:
    """A nested item found no branch with a matching filter signature.

    Recorded by the hierarchy builder instead of raising; the item is still
    placed according to `policy`.
    """

    item_index: int
    tab_path: Tuple[str, ...]
    segment: str
    signature: str
    policy: str
