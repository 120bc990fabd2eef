"""
Shared fixtures: in-memory store, services with a fixed clock and an
HTTP client on an application wired to the in-memory store.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_promotion_service
from app.core.config import Settings
from app.main import create_app
from app.repositories.memory_store import InMemoryDocumentStore
from app.services.promotion_service import PromotionService
from app.services.user_service import UserService

# Instant "présent" des tests : au milieu de la campagne Widget
NOW = datetime(2024, 1, 5, 12, 0, tzinfo=timezone.utc)


class TickingClock:
    """Horloge qui avance d'une seconde à chaque lecture"""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def store():
    return InMemoryDocumentStore(clock=TickingClock(datetime(2023, 12, 1, tzinfo=timezone.utc)))


@pytest.fixture
def user_service(store):
    return UserService(store)


@pytest.fixture
def promotion_service(store):
    return PromotionService(store, clock=lambda: NOW)


@pytest.fixture
def user(user_service):
    return user_service.create_user(
        {"name": "Ana", "email": "ana@example.com", "password": "secret123"}
    )


@pytest.fixture
def promotion_payload(user):
    return {
        "productName": "Widget",
        "price": 10,
        "currency": 1,
        "startDate": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "endDate": datetime(2024, 1, 10, tzinfo=timezone.utc),
        "submittedBy": user["id"],
    }


@pytest.fixture
def settings():
    return Settings(environment="test", store_backend="memory", log_level="WARNING")


@pytest.fixture
def app(settings, store):
    application = create_app(settings=settings, store=store)
    application.dependency_overrides[get_promotion_service] = (
        lambda: PromotionService(store, clock=lambda: NOW)
    )
    return application


@pytest.fixture
def client(app):
    return TestClient(app)
