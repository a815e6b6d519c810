from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class BuildOptionsModel(BaseModel):
    max_path_depth: int = 16
    base_heading_level: int = 2
    pagination_separator: str = "of"
    unresolved_policy: Literal["shared", "earliest"] = "shared"


class ContentItemModel(BaseModel):
    kind: Literal["content", "pagination"] = "content"
    tab_path: Union[str, List[str], Dict[str, str], None] = None
    filter: Union[str, Dict[str, Any], None] = None
    title_tabset: Optional[str] = None
    pagination_break: bool = False
    payload: Any = None


class CollectionModel(BaseModel):
    items: List[ContentItemModel] = Field(default_factory=list)
    labels: Dict[str, str] = Field(default_factory=dict)
    defaults: Dict[str, Any] = Field(default_factory=dict)


class LayoutRequest(BaseModel):
    collections: List[CollectionModel] = Field(default_factory=list)
    name: str = "page"
    options: BuildOptionsModel = Field(default_factory=BuildOptionsModel)
