"""
Models package initialization.
Schema rules of the two collections: users and promotions.
"""

from .user import (
    normalize_user,
    validate_user,
    strip_password,
)
from .promotion import (
    Currency,
    PromotionStatus,
    normalize_promotion,
    validate_promotion,
    is_promotion_active,
)

__all__ = [
    "normalize_user",
    "validate_user",
    "strip_password",
    "Currency",
    "PromotionStatus",
    "normalize_promotion",
    "validate_promotion",
    "is_promotion_active",
]
