# ===================================
# app/repositories/document_store.py
# ===================================
"""
Contrat d'accès au document store, indépendant du backend.

Les services ne parlent qu'à ce protocole : MongoDB en production,
mémoire en développement local et en tests.

Conventions communes aux implémentations :
  - les enregistrements exposent `id` (chaîne) et jamais `_id`
  - `insert` attribue l'id et renseigne createdAt / updatedAt
  - `update_by_id` met à jour updatedAt
  - un id mal formé se comporte comme un id inexistant
  - aucun cache : chaque appel interroge le store
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

ASCENDING = 1
DESCENDING = -1

# (champ, sens) ; sens = ASCENDING ou DESCENDING
SortSpec = Sequence[Tuple[str, int]]
Record = Dict[str, Any]

# Opérateurs reconnus dans les filtres, en plus de l'égalité
FILTER_OPERATORS = ("$gte", "$lte", "$in")


def check_filter(filter: Optional[Mapping[str, Any]]) -> None:
    """Lever ValueError pour tout opérateur hors FILTER_OPERATORS"""
    for value in (filter or {}).values():
        if isinstance(value, Mapping):
            for operator in value:
                if operator not in FILTER_OPERATORS:
                    raise ValueError(f"Unsupported filter operator: {operator}")


class DocumentStore(Protocol):
    """Passerelle de persistance partagée par UserService et PromotionService."""

    def find(
        self,
        collection: str,
        filter: Optional[Mapping[str, Any]] = None,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: int = 0,
        projection: Optional[Sequence[str]] = None,
    ) -> List[Record]:
        """Lister les enregistrements correspondant au filtre (limit=0 : pas de limite)."""
        ...

    def count(self, collection: str, filter: Optional[Mapping[str, Any]] = None) -> int:
        """Compter les enregistrements correspondant au filtre."""
        ...

    def find_by_id(self, collection: str, record_id: str) -> Optional[Record]:
        """Récupérer un enregistrement par son id, None si absent."""
        ...

    def insert(self, collection: str, record: Mapping[str, Any]) -> Record:
        """Insérer un enregistrement et le renvoyer avec id et timestamps."""
        ...

    def update_by_id(self, collection: str, record_id: str,
                     changes: Mapping[str, Any]) -> Optional[Record]:
        """Mise à jour partielle, renvoie l'enregistrement à jour ou None."""
        ...

    def delete_by_id(self, collection: str, record_id: str) -> bool:
        """Supprimer un enregistrement, False s'il n'existait pas."""
        ...

    def ping(self) -> bool:
        """Vérifier que le store répond."""
        ...

    def close(self) -> None:
        """Libérer la connexion."""
        ...


class DuplicateRecordError(Exception):
    """Violation d'un index unique du store"""

    def __init__(self, collection: str, message: str = "Duplicate record"):
        super().__init__(message)
        self.collection = collection
