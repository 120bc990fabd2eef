# ===================================
# app/services/user_service.py
# ===================================

import logging
from typing import Any, Dict, List, Mapping, Tuple

from app.core.exceptions import NotFoundError, ValidationError
from app.core.security import get_password_hash
from app.core.validation import Violation, ViolationRule
from app.models.user import COLLECTION, normalize_user, strip_password, validate_user
from app.repositories.document_store import DocumentStore, DuplicateRecordError
from app.repositories.query_builder import ListQuery

logger = logging.getLogger(__name__)

USER_FIELDS = ("name", "email", "password")

EMAIL_TAKEN = Violation("email", ViolationRule.UNIQUE, "Email already exists")


class UserService:
    """Service pour la logique métier des utilisateurs"""

    def __init__(self, store: DocumentStore):
        self.store = store

    def list_users(self, query: ListQuery) -> Tuple[List[Dict[str, Any]], int]:
        """Lister les utilisateurs (sans mot de passe) et le total"""
        users = self.store.find(
            COLLECTION, query.filter, sort=query.sort, skip=query.skip, limit=query.limit
        )
        total = self.store.count(COLLECTION, query.filter)
        return [strip_password(user) for user in users], total

    def get_user(self, user_id: str) -> Dict[str, Any]:
        user = self.store.find_by_id(COLLECTION, user_id)
        if not user:
            raise NotFoundError("User not found")
        return strip_password(user)

    def create_user(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Valider, hasher le mot de passe puis enregistrer"""
        user_data = normalize_user(self._pick(data))
        violations = validate_user(user_data)
        if violations:
            raise ValidationError(violations)
        self._ensure_email_available(user_data["email"])

        user_data["password"] = get_password_hash(user_data["password"])
        try:
            user = self.store.insert(COLLECTION, user_data)
        except DuplicateRecordError as e:
            raise ValidationError([EMAIL_TAKEN]) from e

        logger.info("Utilisateur créé: %s", user["id"])
        return strip_password(user)

    def update_user(self, user_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Mise à jour partielle : seuls les champs fournis sont validés et modifiés"""
        changes = normalize_user(self._pick(data))
        violations = validate_user(changes, partial=True)
        if violations:
            raise ValidationError(violations)
        if "email" in changes:
            self._ensure_email_available(changes["email"], exclude_id=user_id)
        if "password" in changes:
            changes["password"] = get_password_hash(changes["password"])

        try:
            user = self.store.update_by_id(COLLECTION, user_id, changes)
        except DuplicateRecordError as e:
            raise ValidationError([EMAIL_TAKEN]) from e
        if not user:
            raise NotFoundError("User not found")
        return strip_password(user)

    def delete_user(self, user_id: str) -> None:
        # Pas de cascade : les promotions de l'utilisateur restent en base
        if not self.store.delete_by_id(COLLECTION, user_id):
            raise NotFoundError("User not found")
        logger.info("Utilisateur supprimé: %s", user_id)

    def _ensure_email_available(self, email: str, exclude_id: str = None) -> None:
        """Vérifier l'unicité de l'email"""
        for user in self.store.find(COLLECTION, {"email": email}, limit=2, projection=["email"]):
            if user["id"] != exclude_id:
                raise ValidationError([EMAIL_TAKEN])

    @staticmethod
    def _pick(data: Mapping[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in data.items() if k in USER_FIELDS}
