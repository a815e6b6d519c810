from __future__ import annotations

from dataclasses import asdict
import logging
import math
from typing import Any, Dict, List, Tuple

import numpy as np
import pandas as pd
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder

from api.schemas import CollectionModel, LayoutRequest
from tabnest.collection import Collection, append, combine, create_collection
from tabnest.config import BuildOptions, normalize_options
from tabnest.errors import TabnestError
from tabnest.hierarchy import build_page_trees
from tabnest.items import PAGINATION, pagination_marker
from tabnest.pagination import PageSection, has_pagination_markers, page_label, page_slug, split_pages
from tabnest.serialize import event_to_dict, item_to_dict, serialize, tree_to_dict


app = FastAPI(title="Tabnest Layout API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _collection_from_model(model: CollectionModel) -> Collection:
    coll = create_collection(labels=model.labels, **model.defaults)
    for item in model.items:
        if item.pagination_break or item.kind == PAGINATION:
            cfg = item.payload if isinstance(item.payload, dict) else {}
            position = cfg.get("position", "bottom")
            if position not in ("top", "bottom", "both"):
                raise ValueError(f"pagination position must be top, bottom or both; got {position!r}")
            append(coll, pagination_marker(position=position, separator=cfg.get("separator")))
            continue
        coll.add(item.payload, tab_path=item.tab_path, filter=item.filter, title_tabset=item.title_tabset)
    return coll


def _layout(request: LayoutRequest) -> Tuple[BuildOptions, Collection]:
    options = normalize_options(request.options.model_dump())
    combined = combine(*[_collection_from_model(m) for m in request.collections])
    return options, combined


def _page_meta(section: PageSection, name: str, options: BuildOptions) -> Dict[str, Any]:
    separator = options.pagination_separator
    if section.marker_after is not None and isinstance(section.marker_after.payload, dict):
        separator = section.marker_after.payload.get("separator") or separator
    return {
        "page_index": section.page_index,
        "total_pages": section.total_pages,
        "label": page_label(section, separator),
        "slug": page_slug(name, section.page_index),
    }


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/pages")
def pages(request: LayoutRequest):
    try:
        options, combined = _layout(request)
        sections = split_pages(combined)
        out: List[Dict[str, Any]] = []
        for section in sections:
            meta = _page_meta(section, request.name, options)
            meta["items"] = [item_to_dict(item) for item in section.items]
            meta["marker_after"] = item_to_dict(section.marker_after) if section.marker_after is not None else None
            out.append(meta)
        return _json({"has_pagination": has_pagination_markers(combined), "total_pages": len(sections), "pages": out})
    except (TabnestError, ValueError) as exc:
        logger.info("pages rejected: %s", exc)
        return _error(422, exc)
    except Exception as exc:
        logger.exception("pages failed")
        return _error(500, exc)


@app.post("/tree")
def tree(request: LayoutRequest):
    try:
        options, combined = _layout(request)
        out: List[Dict[str, Any]] = []
        for section, builder in build_page_trees(combined, options):
            meta = _page_meta(section, request.name, options)
            meta["tree"] = tree_to_dict(builder.root)
            meta["unresolved"] = [asdict(u) for u in builder.unresolved]
            out.append(meta)
        return _json({"labels": combined.labels, "pages": out})
    except (TabnestError, ValueError) as exc:
        logger.info("tree rejected: %s", exc)
        return _error(422, exc)
    except Exception as exc:
        logger.exception("tree failed")
        return _error(500, exc)


@app.post("/events")
def events(request: LayoutRequest):
    try:
        options, combined = _layout(request)
        out: List[Dict[str, Any]] = []
        for section, builder in build_page_trees(combined, options):
            meta = _page_meta(section, request.name, options)
            meta["events"] = [event_to_dict(e, options) for e in serialize(builder.root)]
            out.append(meta)
        return _json({"pages": out})
    except (TabnestError, ValueError) as exc:
        logger.info("events rejected: %s", exc)
        return _error(422, exc)
    except Exception as exc:
        logger.exception("events failed")
        return _error(500, exc)
