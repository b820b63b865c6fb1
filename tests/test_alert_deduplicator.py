"""Low-stock alert deduplication tests."""

import asyncio
import logging
import uuid

import pytest
from sqlalchemy.exc import OperationalError

from nubestock.models.alert import AlertPriority, AlertStatus
from nubestock.repositories.alert_repository import AlertRepository
from nubestock.services.alert_deduplicator import (
    LOW_STOCK_ALERT_TYPE,
    PRODUCT_ENTITY_TYPE,
    AlertDeduplicator,
    LowStockCandidate,
)
from tests.conftest import SavepointSession

pytestmark = pytest.mark.unit


def low_stock(entity_id=None, name="Chifles de sal", code="CH-001", current=3, threshold=5):
    return LowStockCandidate(
        entity_id=entity_id or uuid.uuid4(),
        name=name,
        code=code,
        current=current,
        threshold=threshold,
    )


def test_entities_with_an_active_alert_are_skipped(alert_store):
    already_alerted = low_stock()
    fresh = low_stock(code="CH-002")
    alert_store.alerts.append(
        {
            "entity_type": PRODUCT_ENTITY_TYPE,
            "entity_id": already_alerted.entity_id,
            "alert_type": LOW_STOCK_ALERT_TYPE,
            "isactive": True,
        }
    )

    created = asyncio.run(AlertDeduplicator(alert_store).create_missing([already_alerted, fresh]))

    assert created == 1
    assert len(alert_store.active_for(already_alerted.entity_id)) == 1
    assert len(alert_store.active_for(fresh.entity_id)) == 1
    assert alert_store.lookups == 1


def test_repeated_runs_never_duplicate_active_alerts(alert_store):
    candidates = [low_stock(), low_stock(code="CH-002")]
    deduplicator = AlertDeduplicator(alert_store)

    first = asyncio.run(deduplicator.create_missing(candidates))
    second = asyncio.run(deduplicator.create_missing(candidates))

    assert (first, second) == (2, 0)
    assert len(alert_store.alerts) == 2


def test_closed_alert_frees_the_slot(alert_store):
    candidate = low_stock()
    alert_store.alerts.append(
        {
            "entity_type": PRODUCT_ENTITY_TYPE,
            "entity_id": candidate.entity_id,
            "alert_type": LOW_STOCK_ALERT_TYPE,
            "status": AlertStatus.RESOLVED,
            "isactive": False,
        }
    )

    created = asyncio.run(AlertDeduplicator(alert_store).create_missing([candidate]))

    assert created == 1
    assert len(alert_store.active_for(candidate.entity_id)) == 1


def test_repeated_and_unidentified_candidates_are_collapsed(alert_store):
    entity_id = uuid.uuid4()
    candidates = [
        low_stock(entity_id=entity_id),
        low_stock(entity_id=entity_id),
        LowStockCandidate(entity_id=None, name="Sin id", code="X", current=0, threshold=1),
    ]

    created = asyncio.run(AlertDeduplicator(alert_store).create_missing(candidates))

    assert created == 1
    assert alert_store.alerts[0]["entity_id"] == entity_id


def test_no_candidates_skips_the_store(alert_store):
    created = asyncio.run(AlertDeduplicator(alert_store).create_missing([]))

    assert created == 0
    assert alert_store.lookups == 0


def test_store_failure_is_logged_and_swallowed(alert_store, caplog):
    alert_store.fail = True

    with caplog.at_level(logging.WARNING, logger="nubestock.services.alert_deduplicator"):
        created = asyncio.run(AlertDeduplicator(alert_store).create_missing([low_stock()]))

    assert created == 0
    assert alert_store.alerts == []
    assert "Could not create stock_low alerts" in caplog.text


def test_alert_text_and_fields():
    candidate = low_stock(name="Chifles de sal", code="CH-001", current=3.0, threshold=5)
    alert = AlertDeduplicator(None, priority=AlertPriority.CRITICAL).build_alert(candidate)

    assert alert["alert_title"] == "Stock bajo: Chifles de sal"
    assert alert["alert_message"] == (
        'El producto "Chifles de sal" (SKU: CH-001) tiene stock bajo. '
        "Stock actual: 3, Mínimo requerido: 5"
    )
    assert alert["alert_type"] == LOW_STOCK_ALERT_TYPE
    assert alert["entity_type"] == PRODUCT_ENTITY_TYPE
    assert alert["entity_id"] == candidate.entity_id
    assert alert["priority"] == AlertPriority.CRITICAL
    assert alert["status"] == AlertStatus.ACTIVE
    assert alert["isactive"] is True


@pytest.mark.parametrize(
    "current, minimum, expected",
    [(2, 5, True), (5, 5, True), (6, 5, False), (0, 0, True)],
)
def test_product_row_is_low_stock_at_or_below_minimum(current, minimum, expected):
    row = {
        "idfinal_product": uuid.uuid4(),
        "product_name": "Chifles",
        "sku": "CH-001",
        "current_stock": current,
        "minimum_stock": minimum,
    }

    candidate = LowStockCandidate.from_product_row(row)

    assert (candidate is not None) is expected
    if candidate is not None:
        assert candidate.entity_id == row["idfinal_product"]
        assert candidate.code == "CH-001"


def test_failed_lookup_rolls_back_only_its_savepoint():
    session = SavepointSession(OperationalError("SELECT entity_id FROM tb_mae_alert", {}, OSError("connection reset")))
    deduplicator = AlertDeduplicator(AlertRepository(session))

    created = asyncio.run(deduplicator.create_missing([low_stock()]))

    assert created == 0
    assert session.executed == 1
    assert session.savepoints == ["rolled back"]
    assert session.rollbacks == 0
