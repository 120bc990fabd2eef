# ===================================
# app/core/validation.py
# ===================================
"""
Primitives de validation partagées par les modèles User et Promotion.

Une règle ne lève jamais d'exception : elle renvoie une liste de
violations. C'est le service qui décide de rejeter l'opération.
"""

from dataclasses import dataclass, asdict
from datetime import datetime, date, time, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional
import math

from bson import ObjectId


class ViolationRule(str, Enum):
    REQUIRED = "required"
    TYPE = "type"
    ENUM = "enum"
    RANGE = "range"
    LENGTH = "length"
    FORMAT = "format"
    DATE_ORDER = "date_order"
    UNIQUE = "unique"


@dataclass(frozen=True)
class Violation:
    field: Optional[str]
    rule: ViolationRule
    message: str

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["rule"] = self.rule.value
        return data


def is_missing(data: Mapping[str, Any], field: str) -> bool:
    """Champ absent, nul ou chaîne vide"""
    value = data.get(field)
    return value is None or (isinstance(value, str) and value == "")


def check_required(data: Mapping[str, Any], field: str, message: str,
                   partial: bool = False) -> Optional[Violation]:
    """
    Vérifier la présence d'un champ obligatoire.
    En mise à jour partielle, seul un champ fourni explicitement vide est rejeté.
    """
    if partial and field not in data:
        return None
    if is_missing(data, field):
        return Violation(field, ViolationRule.REQUIRED, message)
    return None


def check_max_length(value: Any, field: str, max_length: int, message: str) -> Optional[Violation]:
    if value is None:
        return None
    if not isinstance(value, str):
        return Violation(field, ViolationRule.TYPE, f"{field} must be a string")
    if len(value) > max_length:
        return Violation(field, ViolationRule.LENGTH, message)
    return None


def check_min_length(value: Any, field: str, min_length: int, message: str) -> Optional[Violation]:
    if value is None:
        return None
    if not isinstance(value, str):
        return Violation(field, ViolationRule.TYPE, f"{field} must be a string")
    if len(value) < min_length:
        return Violation(field, ViolationRule.LENGTH, message)
    return None


def check_minimum(value: Any, field: str, minimum: float, message: str) -> Optional[Violation]:
    if value is None:
        return None
    # bool est une sous-classe de int
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return Violation(field, ViolationRule.TYPE, f"{field} must be a number")
    if isinstance(value, float) and not math.isfinite(value):
        return Violation(field, ViolationRule.TYPE, f"{field} must be a finite number")
    if value < minimum:
        return Violation(field, ViolationRule.RANGE, message)
    return None


def check_choice(value: Any, field: str, choices: Iterable[Any], message: str) -> Optional[Violation]:
    if value is None:
        return None
    if isinstance(value, bool) or value not in set(choices):
        return Violation(field, ViolationRule.ENUM, message)
    return None


def check_object_id(value: Any, field: str, message: str) -> Optional[Violation]:
    """Référence vers un autre document : identifiant ObjectId attendu"""
    if value is None or value == "":
        return None
    if not isinstance(value, (str, ObjectId)) or not ObjectId.is_valid(value):
        return Violation(field, ViolationRule.FORMAT, message)
    return None


def as_utc(value: Any) -> Any:
    """Normaliser une date en datetime UTC (les dates naïves sont considérées UTC)"""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    return value


def strip_strings(data: Dict[str, Any], fields: Iterable[str]) -> Dict[str, Any]:
    """Supprimer les espaces autour des champs texte (équivalent de trim)"""
    for field in fields:
        if isinstance(data.get(field), str):
            data[field] = data[field].strip()
    return data


def collect(*violations: Optional[Violation]) -> List[Violation]:
    return [v for v in violations if v is not None]
