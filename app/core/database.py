# ===================================
# app/core/database.py
# ===================================
import logging

from app.core.config import Settings, settings as default_settings
from app.repositories.document_store import DocumentStore
from app.repositories.memory_store import InMemoryDocumentStore
from app.repositories.mongo_store import MongoDocumentStore

logger = logging.getLogger(__name__)


def create_store(settings: Settings = default_settings) -> DocumentStore:
    """
    Construire le document store selon la configuration (mongo/memory)
    """
    if settings.store_backend == "memory":
        logger.warning("Store en mémoire : les données ne sont pas persistées")
        return InMemoryDocumentStore()
    return MongoDocumentStore(
        uri=settings.mongodb_uri,
        timeout_ms=settings.mongodb_timeout_ms,
    )


def init_store(store: DocumentStore) -> None:
    """
    Vérifier la connexion et créer les index si le backend en a
    """
    store.ping()
    ensure_indexes = getattr(store, "ensure_indexes", None)
    if ensure_indexes is not None:
        ensure_indexes()
    logger.info("✓ Document store connecté")


def check_store_connection(store: DocumentStore) -> bool:
    """
    Vérifier la connexion au document store
    """
    try:
        return store.ping()
    except Exception as e:
        logger.error(f"❌ Erreur de connexion au store: {e}")
        return False
