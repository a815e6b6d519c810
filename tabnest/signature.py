"""Filter signatures.

A filter is only ever compared for equality. `signature()` turns whatever the
authoring layer supplied into a canonical, hashable token:

- None (no filter) has its own signature and equals only another None.
- A query string or `RowFilter` is re-printed from its Python syntax tree, so
  spacing and redundant parentheses do not matter. Logically equivalent but
  differently written expressions (`1 == wave` vs `wave == 1`) stay different.
- A mapping of column -> value is dumped as sorted JSON.
- An object exposing a `signature()` method is compared by its result.
- Anything else (a callable predicate, a tuple, ...) is compared by its
  `repr()`: value equality for plain data, identity for functions.
"""

from __future__ import annotations

import ast
import json
import re
from dataclasses import dataclass
from typing import Any, Mapping

import pandas as pd


@dataclass(frozen=True)
class FilterSignature:
    kind: str
    canonical: str = ""

    def __str__(self) -> str:
        if self.kind == "none":
            return "<no filter>"
        return f"{self.kind}:{self.canonical}"


NO_FILTER = FilterSignature("none")


@dataclass(frozen=True)
class RowFilter:
    """A pandas query expression, e.g. ``RowFilter("wave == 1")``."""

    expr: str

    def signature(self) -> str:
        return canonical_expression(self.expr)

    def apply(self, df: pd.DataFrame) -> pd.DataFrame:
        mask = df.eval(self.expr)
        return df[mask]


def canonical_expression(expr: str) -> str:
    text = str(expr).strip()
    try:
        return ast.unparse(ast.parse(text, mode="eval"))
    except SyntaxError:
        # backtick-quoted pandas columns and similar are not Python syntax
        return re.sub(r"\s+", " ", text)


def signature(flt: Any) -> FilterSignature:
    if flt is None:
        return NO_FILTER
    if isinstance(flt, FilterSignature):
        return flt
    if isinstance(flt, (RowFilter, str)):
        expr = flt.expr if isinstance(flt, RowFilter) else flt
        return FilterSignature("expr", canonical_expression(expr))
    if isinstance(flt, Mapping):
        items = {str(k): v for k, v in flt.items()}
        return FilterSignature("mapping", json.dumps(items, sort_keys=True, default=str))
    method = getattr(flt, "signature", None)
    if callable(method):
        return FilterSignature("custom", str(method()))
    # functions repr with their address, so only the same object matches
    return FilterSignature("object", repr(flt))


def signatures_equal(a: FilterSignature, b: FilterSignature) -> bool:
    return a == b


def same_filter(a: Any, b: Any) -> bool:
    return signatures_equal(signature(a), signature(b))
