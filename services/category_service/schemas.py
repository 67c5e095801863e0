from datetime import datetime
from typing import List, Optional

from shared.schemas import ApiModel, Pagination


class CategoryResponse(ApiModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    image_key: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class CategoryProductName(ApiModel):
    id: int
    name: str


class CategoryDetailResponse(CategoryResponse):
    products: List[CategoryProductName] = []


class CategoryEnvelope(ApiModel):
    success: bool = True
    message: Optional[str] = None
    category: CategoryResponse


class CategoryDetail(ApiModel):
    category: CategoryDetailResponse


class CategoryListResponse(ApiModel):
    categories: List[CategoryResponse]
    pagination: Optional[Pagination] = None


class CategoryActive(ApiModel):
    is_active: bool


class CategoryActiveRequest(ApiModel):
    category: CategoryActive


class CategoryActionResponse(ApiModel):
    success: bool = True
    message: str
