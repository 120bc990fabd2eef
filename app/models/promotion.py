# ===================================
# Fichier: app/models/promotion.py
# ===================================
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional
import enum

from app.core.validation import (
    Violation,
    ViolationRule,
    as_utc,
    check_choice,
    check_max_length,
    check_minimum,
    check_object_id,
    check_required,
    collect,
    strip_strings,
)

COLLECTION = "promotions"

PRODUCT_NAME_MAX_LENGTH = 50
COMMENT_MAX_LENGTH = 255

# Champs exposés au tri par l'API
SORTABLE_FIELDS = (
    "createdAt", "updatedAt", "productName", "price", "currency",
    "startDate", "endDate", "status",
)


class Currency(enum.IntEnum):
    MXN = 0
    USD = 1
    EUR = 2
    GBP = 3
    JPY = 4
    CAD = 5
    AUD = 6
    CHF = 7
    CNY = 8


class PromotionStatus(str, enum.Enum):
    PENDING = "pending"
    REJECTED = "rejected"
    APPROVED = "approved"
    COMPLETED = "completed"

    @classmethod
    def values(cls) -> List[str]:
        return [status.value for status in cls]


STATUS_MESSAGE = "Status must be pending, rejected, approved, or completed"


def normalize_promotion(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Nettoyer une promotion candidate avant validation (trim, dates UTC)"""
    normalized = dict(data)
    strip_strings(normalized, ("productName", "comment", "submittedBy"))
    for field in ("startDate", "endDate"):
        if field in normalized:
            normalized[field] = as_utc(normalized[field])
    if isinstance(normalized.get("status"), PromotionStatus):
        normalized["status"] = normalized["status"].value
    if isinstance(normalized.get("currency"), Currency):
        normalized["currency"] = int(normalized["currency"])
    return normalized


def validate_promotion(data: Mapping[str, Any], partial: bool = False,
                       current: Optional[Mapping[str, Any]] = None) -> List[Violation]:
    """
    Valider une promotion complète (création) ou partielle (mise à jour).

    `current` est l'enregistrement existant : en mise à jour, l'ordre des
    dates est contrôlé sur la fusion des valeurs stockées et fournies.
    """
    violations = collect(
        check_required(data, "productName", "Product name is required", partial),
        check_max_length(data.get("productName"), "productName", PRODUCT_NAME_MAX_LENGTH,
                         "Product name cannot be more than 50 characters"),
        check_required(data, "price", "Price is required", partial),
        check_minimum(data.get("price"), "price", 0, "Price cannot be negative"),
        check_required(data, "currency", "Currency is required", partial),
        check_choice(data.get("currency"), "currency", [c.value for c in Currency],
                     "Invalid currency code"),
        check_required(data, "startDate", "Start date is required", partial),
        check_required(data, "endDate", "End date is required", partial),
        check_choice(data.get("status"), "status", PromotionStatus.values(), STATUS_MESSAGE),
        check_max_length(data.get("comment"), "comment", COMMENT_MAX_LENGTH,
                         "Comment cannot be more than 255 characters"),
        check_required(data, "submittedBy", "Submitted by user is required", partial),
        check_object_id(data.get("submittedBy"), "submittedBy", "Submitted by must be a valid user id"),
    )
    if partial and "status" in data and data["status"] is None:
        violations.append(Violation("status", ViolationRule.REQUIRED, "Status is required"))

    if "startDate" in data or "endDate" in data or not partial:
        merged = dict(current or {})
        merged.update({k: v for k, v in data.items() if k in ("startDate", "endDate")})
        start, end = merged.get("startDate"), merged.get("endDate")
        if isinstance(start, datetime) and isinstance(end, datetime):
            if not as_utc(end) > as_utc(start):
                violations.append(Violation(
                    "endDate", ViolationRule.DATE_ORDER, "End date must be after start date"
                ))
    return violations


def is_promotion_active(promotion: Mapping[str, Any], now: Optional[datetime] = None) -> bool:
    """Approuvée et en cours : startDate <= now <= endDate"""
    now = as_utc(now or datetime.now(timezone.utc))
    start, end = promotion.get("startDate"), promotion.get("endDate")
    if promotion.get("status") != PromotionStatus.APPROVED.value or start is None or end is None:
        return False
    return as_utc(start) <= now <= as_utc(end)
