"""
PromotionService: creation defaults, status updates, active window and
submitter resolution.
"""

from datetime import datetime, timezone

import pytest

from app.core.exceptions import NotFoundError, ValidationError
from app.core.validation import ViolationRule
from app.repositories.query_builder import build_list_query

from conftest import NOW

pytestmark = pytest.mark.unit

MISSING_ID = "65a000000000000000000099"


def test_create_defaults_to_pending(promotion_service, promotion_payload, user):
    promotion = promotion_service.create_promotion(promotion_payload)

    assert promotion["status"] == "pending"
    assert promotion["submittedBy"] == {"id": user["id"]}
    assert promotion["isActive"] is False


def test_create_rejects_end_before_start(promotion_service, promotion_payload, store):
    promotion_payload["endDate"] = datetime(2023, 12, 31, tzinfo=timezone.utc)

    with pytest.raises(ValidationError) as exc_info:
        promotion_service.create_promotion(promotion_payload)

    assert exc_info.value.violations[0].rule == ViolationRule.DATE_ORDER
    assert store.count("promotions") == 0


@pytest.mark.parametrize("currency", [-1, 9])
def test_create_rejects_unknown_currency(promotion_service, promotion_payload, currency):
    promotion_payload["currency"] = currency

    with pytest.raises(ValidationError):
        promotion_service.create_promotion(promotion_payload)


def test_create_ignores_unknown_fields(promotion_service, promotion_payload, store):
    promotion_payload["isActive"] = True
    promotion = promotion_service.create_promotion(promotion_payload)

    assert "isActive" not in store.find_by_id("promotions", promotion["id"])


def test_submitter_is_resolved_to_id_only(promotion_service, promotion_payload, user):
    promotion = promotion_service.create_promotion(promotion_payload)

    fetched = promotion_service.get_promotion(promotion["id"])

    assert fetched["submittedBy"] == {"id": user["id"]}


def test_orphaned_submitter_resolves_to_none(promotion_service, promotion_payload,
                                             user_service, user):
    promotion = promotion_service.create_promotion(promotion_payload)
    user_service.delete_user(user["id"])

    # Pas de cascade : la promotion reste, la référence devient orpheline
    assert promotion_service.get_promotion(promotion["id"])["submittedBy"] is None


def test_update_status_flow_and_active_window(promotion_service, promotion_payload):
    promotion = promotion_service.create_promotion(promotion_payload)
    assert promotion_service.get_active_promotions() == []

    approved = promotion_service.update_status(promotion["id"], "approved")
    assert approved["isActive"] is True
    assert [p["id"] for p in promotion_service.get_active_promotions()] == [promotion["id"]]

    completed = promotion_service.update_status(promotion["id"], "completed", comment=" done ")
    assert completed["comment"] == "done"
    assert promotion_service.get_active_promotions() == []


def test_any_status_transition_is_allowed(promotion_service, promotion_payload):
    promotion = promotion_service.create_promotion(promotion_payload)

    for status in ["completed", "pending", "rejected", "approved", "pending"]:
        assert promotion_service.update_status(promotion["id"], status)["status"] == status


def test_update_status_rejects_unknown_status_before_touching_store(
        promotion_service, promotion_payload, store):
    promotion = promotion_service.create_promotion(promotion_payload)
    before = store.find_by_id("promotions", promotion["id"])

    with pytest.raises(ValidationError) as exc_info:
        promotion_service.update_status(promotion["id"], "archived")

    assert exc_info.value.message == "Invalid status provided"
    assert store.find_by_id("promotions", promotion["id"]) == before


def test_update_status_invalid_status_on_missing_id_is_validation_error(promotion_service):
    with pytest.raises(ValidationError):
        promotion_service.update_status(MISSING_ID, None)


def test_update_status_missing_promotion(promotion_service):
    with pytest.raises(NotFoundError):
        promotion_service.update_status(MISSING_ID, "approved")


def test_update_status_without_comment_keeps_existing(promotion_service, promotion_payload):
    promotion_payload["comment"] = "first"
    promotion = promotion_service.create_promotion(promotion_payload)

    updated = promotion_service.update_status(promotion["id"], "rejected", comment="")

    assert updated["comment"] == "first"


def test_active_excludes_pending_and_out_of_window(promotion_service, promotion_payload):
    pending = promotion_service.create_promotion(promotion_payload)
    future = promotion_service.create_promotion(dict(
        promotion_payload,
        productName="Later",
        startDate=datetime(2024, 2, 1, tzinfo=timezone.utc),
        endDate=datetime(2024, 2, 10, tzinfo=timezone.utc),
    ))
    current = promotion_service.create_promotion(dict(promotion_payload, productName="Now"))
    promotion_service.update_status(future["id"], "approved")
    promotion_service.update_status(current["id"], "approved")

    active = promotion_service.get_active_promotions()

    assert [p["id"] for p in active] == [current["id"]]
    assert pending["id"] not in [p["id"] for p in active]
    assert all(p["isActive"] for p in active)


def test_active_is_evaluated_at_call_time(store, promotion_payload):
    from app.services.promotion_service import PromotionService

    instants = iter([NOW, datetime(2024, 3, 1, tzinfo=timezone.utc)])
    service = PromotionService(store, clock=lambda: NOW)
    promotion = service.create_promotion(promotion_payload)
    service.update_status(promotion["id"], "approved")

    moving = PromotionService(store, clock=lambda: next(instants))
    assert len(moving.get_active_promotions()) == 1
    assert moving.get_active_promotions() == []


def test_update_promotion_is_partial(promotion_service, promotion_payload):
    promotion = promotion_service.create_promotion(promotion_payload)

    updated = promotion_service.update_promotion(promotion["id"], {"price": 7.5})

    assert updated["price"] == 7.5
    assert updated["productName"] == "Widget"
    assert updated["status"] == "pending"


def test_update_promotion_checks_dates_against_stored_record(promotion_service, promotion_payload):
    promotion = promotion_service.create_promotion(promotion_payload)

    with pytest.raises(ValidationError) as exc_info:
        promotion_service.update_promotion(
            promotion["id"], {"endDate": datetime(2023, 12, 1, tzinfo=timezone.utc)}
        )

    assert exc_info.value.violations[0].rule == ViolationRule.DATE_ORDER
    stored = promotion_service.get_promotion(promotion["id"])
    assert stored["endDate"] == promotion_payload["endDate"]


def test_update_promotion_rejects_invalid_fields(promotion_service, promotion_payload):
    promotion = promotion_service.create_promotion(promotion_payload)

    with pytest.raises(ValidationError):
        promotion_service.update_promotion(promotion["id"], {"price": -1})
    with pytest.raises(ValidationError):
        promotion_service.update_promotion(promotion["id"], {"currency": 9})


def test_update_missing_promotion(promotion_service):
    with pytest.raises(NotFoundError):
        promotion_service.update_promotion(MISSING_ID, {"price": 3})
    with pytest.raises(NotFoundError):
        promotion_service.update_promotion(
            MISSING_ID, {"startDate": datetime(2024, 1, 1, tzinfo=timezone.utc)}
        )


def test_delete_promotion(promotion_service, promotion_payload):
    promotion = promotion_service.create_promotion(promotion_payload)

    promotion_service.delete_promotion(promotion["id"])

    with pytest.raises(NotFoundError):
        promotion_service.delete_promotion(promotion["id"])


def test_list_promotions_filters_and_paginates(promotion_service, promotion_payload):
    created = [
        promotion_service.create_promotion(dict(promotion_payload, productName=f"P{i}"))
        for i in range(5)
    ]
    promotion_service.update_status(created[0]["id"], "approved")

    page, total = promotion_service.list_promotions(build_list_query(page=2, limit=2))
    assert total == 5
    # Plus récentes d'abord
    assert [p["productName"] for p in page] == ["P2", "P1"]

    approved, total = promotion_service.list_promotions(
        build_list_query(filters={"status": "approved"})
    )
    assert total == 1
    assert approved[0]["id"] == created[0]["id"]


def test_list_by_user(promotion_service, promotion_payload, user_service):
    other = user_service.create_user({"email": "bob@example.com", "password": "secret456"})
    first = promotion_service.create_promotion(promotion_payload)
    second = promotion_service.create_promotion(dict(promotion_payload, productName="Second"))
    promotion_service.create_promotion(dict(promotion_payload, submittedBy=other["id"]))

    promotions, total, query = promotion_service.list_by_user(
        promotion_payload["submittedBy"], page=1, limit=10
    )

    assert total == 2
    assert [p["id"] for p in promotions] == [second["id"], first["id"]]
    assert query.sort == (("createdAt", -1),)
