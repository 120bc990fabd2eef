# ===================================
# app/api/deps.py
# ===================================
from fastapi import Depends, Request

from app.core.config import Settings
from app.repositories.document_store import DocumentStore
from app.services.promotion_service import PromotionService
from app.services.user_service import UserService


def get_app_settings(request: Request) -> Settings:
    """
    Settings de l'application courante (remplaçables en test via create_app)
    """
    return request.app.state.settings


def get_store(request: Request) -> DocumentStore:
    """
    Document store ouvert au démarrage de l'application
    """
    return request.app.state.store


def get_user_service(store: DocumentStore = Depends(get_store)) -> UserService:
    return UserService(store)


def get_promotion_service(store: DocumentStore = Depends(get_store)) -> PromotionService:
    return PromotionService(store)
