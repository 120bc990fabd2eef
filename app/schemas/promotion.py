# ===================================
# app/schemas/promotion.py
# ===================================

from typing import List, Optional
from datetime import datetime

from app.schemas.common import CamelModel, Pagination


class PromotionBase(CamelModel):
    # Types uniquement : obligatoire / bornes / enum sont vérifiés par le service
    product_name: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[str] = None
    comment: Optional[str] = None
    submitted_by: Optional[str] = None


class PromotionCreate(PromotionBase):
    pass


class PromotionUpdate(PromotionBase):
    pass


class PromotionStatusUpdate(CamelModel):
    status: Optional[str] = None
    comment: Optional[str] = None


class SubmittedBy(CamelModel):
    id: str


class Promotion(CamelModel):
    id: str
    product_name: str
    price: float
    currency: int
    start_date: datetime
    end_date: datetime
    status: str
    comment: Optional[str] = None
    submitted_by: Optional[SubmittedBy] = None
    is_active: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PromotionResponse(CamelModel):
    success: bool = True
    message: str
    data: Promotion


class ActivePromotionsResponse(CamelModel):
    success: bool = True
    message: str
    data: List[Promotion]


class PromotionsList(CamelModel):
    promotions: List[Promotion]
    pagination: Pagination


class PromotionsListResponse(CamelModel):
    success: bool = True
    message: str
    data: PromotionsList
