# ===================================
# app/services/promotion_service.py
# ===================================

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from app.core.exceptions import NotFoundError, ValidationError
from app.core.validation import ViolationRule
from app.models import user as user_model
from app.models.promotion import (
    COLLECTION,
    PromotionStatus,
    is_promotion_active,
    normalize_promotion,
    validate_promotion,
)
from app.repositories.document_store import DocumentStore
from app.repositories.query_builder import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    ListQuery,
    build_list_query,
)

logger = logging.getLogger(__name__)

PROMOTION_FIELDS = (
    "productName", "price", "currency", "startDate", "endDate",
    "status", "comment", "submittedBy",
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PromotionService:
    """Service pour la logique métier des promotions"""

    def __init__(self, store: DocumentStore, clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.clock = clock

    def list_promotions(self, query: ListQuery) -> Tuple[List[Dict[str, Any]], int]:
        """Lister les promotions filtrées et paginées, et le total"""
        promotions = self.store.find(
            COLLECTION, query.filter, sort=query.sort, skip=query.skip, limit=query.limit
        )
        total = self.store.count(COLLECTION, query.filter)
        return self._present_many(promotions), total

    def get_promotion(self, promotion_id: str) -> Dict[str, Any]:
        promotion = self.store.find_by_id(COLLECTION, promotion_id)
        if not promotion:
            raise NotFoundError("Promotion not found")
        return self._present_many([promotion])[0]

    def create_promotion(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Créer une promotion, en attente d'approbation par défaut"""
        promotion_data = normalize_promotion(self._pick(data))
        if promotion_data.get("status") is None:
            promotion_data["status"] = PromotionStatus.PENDING.value
        violations = validate_promotion(promotion_data)
        if violations:
            raise ValidationError(violations)

        promotion = self.store.insert(COLLECTION, promotion_data)
        logger.info("Promotion créée: %s (%s)", promotion["id"], promotion["productName"])
        return self._present_many([promotion])[0]

    def update_promotion(self, promotion_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Mise à jour partielle d'une promotion"""
        changes = normalize_promotion(self._pick(data))

        # L'ordre des dates se vérifie sur la promotion fusionnée
        current = None
        if "startDate" in changes or "endDate" in changes:
            current = self.store.find_by_id(COLLECTION, promotion_id)
            if not current:
                raise NotFoundError("Promotion not found")

        violations = validate_promotion(changes, partial=True, current=current)
        if violations:
            raise ValidationError(violations)

        promotion = self.store.update_by_id(COLLECTION, promotion_id, changes)
        if not promotion:
            raise NotFoundError("Promotion not found")
        return self._present_many([promotion])[0]

    def delete_promotion(self, promotion_id: str) -> None:
        if not self.store.delete_by_id(COLLECTION, promotion_id):
            raise NotFoundError("Promotion not found")
        logger.info("Promotion supprimée: %s", promotion_id)

    def get_active_promotions(self) -> List[Dict[str, Any]]:
        """Promotions approuvées dont la période contient l'instant présent"""
        now = self.clock()
        promotions = self.store.find(COLLECTION, {
            "status": PromotionStatus.APPROVED.value,
            "startDate": {"$lte": now},
            "endDate": {"$gte": now},
        })
        return self._present_many(promotions, now=now)

    def update_status(self, promotion_id: str, status: Any,
                      comment: Optional[str] = None) -> Dict[str, Any]:
        """
        Changer le statut (et éventuellement le commentaire) d'une promotion.
        Toutes les transitions sont autorisées entre les quatre statuts.
        """
        if isinstance(status, PromotionStatus):
            status = status.value
        if status not in PromotionStatus.values():
            raise ValidationError.single("status", ViolationRule.ENUM, "Invalid status provided")

        changes: Dict[str, Any] = {"status": status}
        if comment:
            changes["comment"] = comment
        changes = normalize_promotion(changes)
        violations = validate_promotion(changes, partial=True)
        if violations:
            raise ValidationError(violations)

        promotion = self.store.update_by_id(COLLECTION, promotion_id, changes)
        if not promotion:
            raise NotFoundError("Promotion not found")
        logger.info("Statut de la promotion %s: %s", promotion_id, status)
        return self._present_many([promotion])[0]

    def list_by_user(self, user_id: str, page: Optional[int] = DEFAULT_PAGE,
                     limit: Optional[int] = DEFAULT_LIMIT,
                     max_limit: Optional[int] = None) -> Tuple[List[Dict[str, Any]], int, ListQuery]:
        """Promotions soumises par un utilisateur, les plus récentes d'abord"""
        options = {"max_limit": max_limit} if max_limit else {}
        query = build_list_query(
            page=page,
            limit=limit,
            sort_by="createdAt",
            sort_order="desc",
            filters={"submittedBy": user_id},
            **options,
        )
        promotions, total = self.list_promotions(query)
        return promotions, total, query

    def resolve_submitters(self, user_ids: Iterable[str]) -> set:
        """
        Résoudre les références submittedBy : seul l'id est chargé,
        jamais le nom ni l'email.
        """
        ids = sorted({str(uid) for uid in user_ids if uid})
        if not ids:
            return set()
        users = self.store.find(user_model.COLLECTION, {"id": {"$in": ids}}, projection=["id"])
        return {user["id"] for user in users}

    def _present_many(self, promotions: List[Mapping[str, Any]],
                      now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        now = now or self.clock()
        known = self.resolve_submitters(p.get("submittedBy") for p in promotions)
        presented = []
        for promotion in promotions:
            item = dict(promotion)
            submitter = promotion.get("submittedBy")
            # Référence orpheline -> null
            item["submittedBy"] = {"id": str(submitter)} if str(submitter) in known else None
            item["isActive"] = is_promotion_active(promotion, now)
            presented.append(item)
        return presented

    @staticmethod
    def _pick(data: Mapping[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in data.items() if k in PROMOTION_FIELDS}
