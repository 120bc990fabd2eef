# ===================================
# app/repositories/query_builder.py
# ===================================
"""
Construction des requêtes de liste : pagination, tri et filtres d'égalité.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from app.core.validation import ViolationRule
from app.core.exceptions import ValidationError
from app.repositories.document_store import ASCENDING, DESCENDING

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
DEFAULT_SORT_BY = "createdAt"
DEFAULT_SORT_ORDER = "desc"
MAX_LIMIT = 100


@dataclass(frozen=True)
class ListQuery:
    """Requête prête pour DocumentStore.find / count"""
    page: int
    limit: int
    skip: int
    sort: Tuple[Tuple[str, int], ...]
    filter: Dict[str, Any] = field(default_factory=dict)


def clamp_pagination(page: Optional[int], limit: Optional[int],
                     max_limit: int = MAX_LIMIT) -> Tuple[int, int]:
    """
    Normaliser page et limit : page >= 1, 1 <= limit <= max_limit
    """
    page = DEFAULT_PAGE if page is None else page
    limit = DEFAULT_LIMIT if limit is None else limit
    if page < 1:
        page = 1
    if limit < 1:
        limit = 1
    if limit > max_limit:
        limit = max_limit
    return page, limit


def build_list_query(
    page: Optional[int] = DEFAULT_PAGE,
    limit: Optional[int] = DEFAULT_LIMIT,
    sort_by: Optional[str] = DEFAULT_SORT_BY,
    sort_order: Optional[str] = DEFAULT_SORT_ORDER,
    filters: Optional[Mapping[str, Any]] = None,
    sortable: Optional[Sequence[str]] = None,
    max_limit: int = MAX_LIMIT,
) -> ListQuery:
    """
    Traduire les paramètres de liste en requête de store.

    - offset = (page - 1) * limit
    - sort_order "asc" -> croissant, toute autre valeur -> décroissant
    - seuls les filtres renseignés contraignent le résultat
    """
    page, limit = clamp_pagination(page, limit, max_limit)
    sort_by = sort_by or DEFAULT_SORT_BY
    if sortable is not None and sort_by not in sortable:
        raise ValidationError.single(
            "sortBy", ViolationRule.ENUM,
            f"Cannot sort by '{sort_by}', expected one of: {', '.join(sortable)}",
        )
    direction = ASCENDING if sort_order == "asc" else DESCENDING

    # Absence de filtre = pas de contrainte (jamais "égal à null")
    conditions = {
        name: value for name, value in (filters or {}).items()
        if value is not None and value != ""
    }

    return ListQuery(
        page=page,
        limit=limit,
        skip=(page - 1) * limit,
        sort=((sort_by, direction),),
        filter=conditions,
    )


def pagination_meta(page: int, limit: int, total: int) -> Dict[str, int]:
    """Bloc de pagination des réponses de liste"""
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }
