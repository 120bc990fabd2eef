# ===================================
# app/models/user.py
# ===================================
import re
from typing import Any, Dict, List, Mapping, Optional

from app.core.validation import (
    Violation,
    ViolationRule,
    check_max_length,
    check_min_length,
    check_required,
    collect,
    strip_strings,
)

COLLECTION = "users"

NAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6

SORTABLE_FIELDS = ("createdAt", "updatedAt", "name", "email")

# Champ en écriture seule, jamais renvoyé
WRITE_ONLY_FIELDS = ("password",)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_user(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Nettoyer un utilisateur candidat (trim, email en minuscules)"""
    normalized = dict(data)
    strip_strings(normalized, ("name", "email"))
    if isinstance(normalized.get("email"), str):
        normalized["email"] = normalized["email"].lower()
    return normalized


def validate_user(data: Mapping[str, Any], partial: bool = False) -> List[Violation]:
    """Valider un utilisateur complet (création) ou partiel (mise à jour)"""
    violations = collect(
        check_max_length(data.get("name"), "name", NAME_MAX_LENGTH,
                         "Name cannot be more than 50 characters"),
        check_required(data, "email", "Email is required", partial),
        check_required(data, "password", "Password is required", partial),
        check_min_length(data.get("password"), "password", PASSWORD_MIN_LENGTH,
                         "Password must be at least 6 characters"),
    )
    email = data.get("email")
    if isinstance(email, str) and email and not EMAIL_PATTERN.match(email):
        violations.append(Violation("email", ViolationRule.FORMAT, "Please provide a valid email"))
    return violations


def strip_password(user: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """Retirer les champs en écriture seule d'un enregistrement"""
    if user is None:
        return None
    return {k: v for k, v in user.items() if k not in WRITE_ONLY_FIELDS}
