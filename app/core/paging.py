import math
from typing import Generic, TypeVar
from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

class PageMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    page: int
    limit: int
    total_pages: int = Field(serialization_alias="totalPages")

class Page(BaseModel, Generic[T]):
    data: list[T]
    meta: PageMeta

def offset_for(page: int, limit: int) -> int:
    return page * limit

def page_meta(total: int, page: int, limit: int) -> PageMeta:
    return PageMeta(total=total, page=page, limit=limit, total_pages=math.ceil(total / limit) if limit else 0)
