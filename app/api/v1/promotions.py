# ===================================
# app/api/v1/promotions.py
# ===================================
from typing import Any, Optional
from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_app_settings, get_promotion_service
from app.core.config import Settings
from app.core.exceptions import operation
from app.models.promotion import SORTABLE_FIELDS
from app.repositories.query_builder import build_list_query, pagination_meta
from app.schemas.common import ERROR_RESPONSES, MessageResponse, envelope
from app.schemas.promotion import (
    ActivePromotionsResponse,
    Promotion,
    PromotionCreate,
    PromotionResponse,
    PromotionStatusUpdate,
    PromotionUpdate,
    PromotionsListResponse,
)
from app.services.promotion_service import PromotionService

router = APIRouter(responses=ERROR_RESPONSES)


@router.get("", response_model=PromotionsListResponse, include_in_schema=False)
@router.get("/", response_model=PromotionsListResponse)
def list_promotions(
    page: int = Query(1, description="Numéro de page"),
    limit: int = Query(10, description="Nombre d'éléments par page"),
    sort_by: str = Query("createdAt", alias="sortBy", description="Champ de tri"),
    sort_order: str = Query("desc", alias="sortOrder", description="Ordre: asc, desc"),
    status_filter: Optional[str] = Query(None, alias="status", description="Filtrer par statut"),
    submitted_by: Optional[str] = Query(None, alias="submittedBy", description="Filtrer par utilisateur"),
    service: PromotionService = Depends(get_promotion_service),
    settings: Settings = Depends(get_app_settings),
) -> Any:
    """
    Récupérer la liste des promotions avec filtres et pagination
    """
    query = build_list_query(
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        filters={"status": status_filter, "submittedBy": submitted_by},
        sortable=SORTABLE_FIELDS,
        max_limit=settings.max_page_size,
    )
    with operation("Failed to retrieve promotions"):
        promotions, total = service.list_promotions(query)

    return PromotionsListResponse(
        message="Promotions retrieved successfully",
        data={
            "promotions": [Promotion.model_validate(p) for p in promotions],
            "pagination": pagination_meta(query.page, query.limit, total),
        },
    )


@router.get("/active", response_model=ActivePromotionsResponse)
def get_active_promotions(
    service: PromotionService = Depends(get_promotion_service),
) -> Any:
    """
    Récupérer les promotions approuvées en cours de validité
    """
    with operation("Failed to retrieve active promotions"):
        promotions = service.get_active_promotions()
    return ActivePromotionsResponse(
        message="Active promotions retrieved successfully",
        data=[Promotion.model_validate(p) for p in promotions],
    )


@router.get("/user/{user_id}", response_model=PromotionsListResponse)
def get_promotions_by_user(
    user_id: str,
    page: int = Query(1, description="Numéro de page"),
    limit: int = Query(10, description="Nombre d'éléments par page"),
    service: PromotionService = Depends(get_promotion_service),
    settings: Settings = Depends(get_app_settings),
) -> Any:
    """
    Récupérer les promotions soumises par un utilisateur (plus récentes d'abord)
    """
    with operation("Failed to retrieve user promotions"):
        promotions, total, query = service.list_by_user(
            user_id, page=page, limit=limit, max_limit=settings.max_page_size
        )
    return PromotionsListResponse(
        message="User promotions retrieved successfully",
        data={
            "promotions": [Promotion.model_validate(p) for p in promotions],
            "pagination": pagination_meta(query.page, query.limit, total),
        },
    )


@router.get("/{promotion_id}", response_model=PromotionResponse)
def get_promotion(
    promotion_id: str,
    service: PromotionService = Depends(get_promotion_service),
) -> Any:
    """
    Récupérer une promotion par son ID
    """
    with operation("Failed to retrieve promotion"):
        promotion = service.get_promotion(promotion_id)
    return PromotionResponse(
        message="Promotion retrieved successfully",
        data=Promotion.model_validate(promotion),
    )


@router.post("", response_model=PromotionResponse, status_code=status.HTTP_201_CREATED,
             include_in_schema=False)
@router.post("/", response_model=PromotionResponse, status_code=status.HTTP_201_CREATED)
def create_promotion(
    promotion_data: PromotionCreate,
    service: PromotionService = Depends(get_promotion_service),
) -> Any:
    """
    Créer une nouvelle promotion (statut "pending" par défaut)
    """
    with operation("Failed to create promotion"):
        promotion = service.create_promotion(
            promotion_data.model_dump(by_alias=True, exclude_unset=True)
        )
    return PromotionResponse(
        message="Promotion created successfully",
        data=Promotion.model_validate(promotion),
    )


@router.put("/{promotion_id}", response_model=PromotionResponse)
def update_promotion(
    promotion_id: str,
    promotion_update: PromotionUpdate,
    service: PromotionService = Depends(get_promotion_service),
) -> Any:
    """
    Mettre à jour une promotion (seuls les champs fournis sont modifiés)
    """
    with operation("Failed to update promotion"):
        promotion = service.update_promotion(
            promotion_id, promotion_update.model_dump(by_alias=True, exclude_unset=True)
        )
    return PromotionResponse(
        message="Promotion updated successfully",
        data=Promotion.model_validate(promotion),
    )


@router.delete("/{promotion_id}", response_model=MessageResponse)
def delete_promotion(
    promotion_id: str,
    service: PromotionService = Depends(get_promotion_service),
) -> Any:
    """
    Supprimer une promotion
    """
    with operation("Failed to delete promotion"):
        service.delete_promotion(promotion_id)
    return envelope("Promotion deleted successfully")


@router.patch("/{promotion_id}/status", response_model=PromotionResponse)
def update_promotion_status(
    promotion_id: str,
    status_update: PromotionStatusUpdate,
    service: PromotionService = Depends(get_promotion_service),
) -> Any:
    """
    Changer le statut d'une promotion (pending, rejected, approved, completed)
    """
    with operation("Failed to update promotion status"):
        promotion = service.update_status(
            promotion_id, status_update.status, comment=status_update.comment
        )
    return PromotionResponse(
        message="Promotion status updated successfully",
        data=Promotion.model_validate(promotion),
    )
