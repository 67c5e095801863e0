from datetime import datetime
from typing import List, Optional
from pydantic import Field

from shared.schemas import ApiModel, Pagination

MAX_HERO_IMAGES = 2
MAX_IMAGES = 5


class CategoryRef(ApiModel):
    id: int
    name: str
    slug: str


class ProductResponse(ApiModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    price: float
    discount: float
    hero_image: List[str] = []
    images: List[str] = []
    category_id: Optional[int] = None
    category: Optional[CategoryRef] = None
    color: Optional[str] = None
    material: Optional[str] = None
    weight: Optional[str] = None
    in_stock: bool
    is_archived: bool
    featured: bool
    is_active: bool
    sales_count: int
    best_seller: bool
    created_at: datetime
    updated_at: datetime


class ProductSummary(ApiModel):
    name: str
    slug: str
    price: float


class ProductOption(ApiModel):
    id: int
    name: str


class ProductUpdate(ApiModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    discount: Optional[float] = Field(default=None, ge=0, le=100)
    category_id: Optional[int] = None
    color: Optional[str] = None
    material: Optional[str] = None
    weight: Optional[str] = None
    in_stock: Optional[bool] = None
    is_archived: Optional[bool] = None
    featured: Optional[bool] = None
    is_active: Optional[bool] = None
    hero_image: Optional[List[str]] = None
    images: Optional[List[str]] = None


class ProductUpdateRequest(ApiModel):
    product: ProductUpdate


class ProductActive(ApiModel):
    is_active: bool


class ProductActiveRequest(ApiModel):
    product: ProductActive


class ProductQuery(ApiModel):
    category_id: Optional[List[int]] = None
    product_id: Optional[List[int]] = None
    name: Optional[str] = None
    featured: Optional[bool] = None
    in_stock: Optional[bool] = None
    page: int = 1
    limit: int = 10
    sort_by: Optional[str] = None


class ProductListResponse(ApiModel):
    products: List[ProductResponse]
    pagination: Pagination


class ProductEnvelope(ApiModel):
    success: bool = True
    message: Optional[str] = None
    product: ProductResponse


class ProductDetail(ApiModel):
    product: ProductResponse


class ProductSearchResponse(ApiModel):
    products: List[ProductSummary]


class ProductOptionsResponse(ApiModel):
    products: List[ProductOption]


class ProductActionResponse(ApiModel):
    success: bool = True
    message: str
