"""Bulk upload pipeline tests: body normalization, validation and alerting."""

import asyncio
import json

import pytest

from nubestock.errors import BulkPayloadError
from nubestock.services.alert_deduplicator import AlertDeduplicator
from nubestock.services.bulk_upload_service import (
    CLIENT_BULK,
    MATERIAL_BULK,
    PRODUCT_BULK,
    BulkUploadService,
    normalize_bulk_body,
)
from tests.conftest import product_record

pytestmark = pytest.mark.unit

RECORDS = [{"sku": "A"}, {"sku": "B"}]


@pytest.mark.parametrize(
    "body",
    [
        RECORDS,
        json.dumps(RECORDS),
        {"products": RECORDS},
        {"items": RECORDS},
        {"data": RECORDS},
        {"records": RECORDS},
    ],
)
def test_accepted_body_shapes(body):
    assert normalize_bulk_body(body, ("products",), 1000) == RECORDS


@pytest.mark.parametrize(
    "body",
    [
        {"materials": RECORDS},
        "not json",
        json.dumps({"sku": "A"}),
        42,
        None,
        [],
        {"products": []},
    ],
)
def test_rejected_body_shapes(body):
    with pytest.raises(BulkPayloadError) as exc_info:
        normalize_bulk_body(body, ("products",), 1000)
    assert exc_info.value.status_code == 400


def test_too_many_records_is_rejected_before_reconciliation(product_store):
    service = BulkUploadService(PRODUCT_BULK, product_store, max_records=1000)
    body = [product_record(f"SKU-{i}") for i in range(1001)]

    with pytest.raises(BulkPayloadError) as exc_info:
        asyncio.run(service.upload(body))

    assert "1000" in exc_info.value.message
    assert product_store.lookups == 0


def test_invalid_records_fail_with_validation_reason(product_store):
    service = BulkUploadService(PRODUCT_BULK, product_store)
    body = [
        product_record("GOOD-1"),
        product_record("BAD-1", unit_price=0),
        {"product_name": "Sin SKU"},
        "not an object",
    ]

    result = asyncio.run(service.upload(body))

    assert (result.total, result.created, result.failed) == (4, 1, 3)
    errors = {e.index: e for e in result.errors}
    assert errors[2].key == "BAD-1"
    assert errors[2].error.startswith("Validation: unit_price")
    assert errors[3].key == "N/A"
    assert errors[3].name == "Sin SKU"
    assert errors[4].error == "Validation: record must be an object"


def test_unset_fields_are_not_overwritten_on_update(product_store):
    product_store.seed(sku="KEEP", product_name="Original", current_stock=40, minimum_stock=10, isactive=True)
    service = BulkUploadService(PRODUCT_BULK, product_store)

    body = [{"sku": "KEEP", "product_name": "Renamed", "idorigin": product_record("x")["idorigin"], "unit_price": 2}]
    result = asyncio.run(service.upload(body))

    assert result.updated == 1
    row = product_store.by_key("KEEP")
    assert row["product_name"] == "Renamed"
    assert row["current_stock"] == 40
    assert row["isactive"] is True


def test_inserted_rows_default_to_active(product_store):
    service = BulkUploadService(PRODUCT_BULK, product_store)

    asyncio.run(service.upload([product_record("NEW")]))

    assert product_store.by_key("NEW")["isactive"] is True


def test_low_stock_rows_raise_one_alert_each(product_store, alert_store):
    product_store.seed(sku="LOW-OLD", product_name="Viejo", current_stock=50, minimum_stock=10)
    service = BulkUploadService(PRODUCT_BULK, product_store, AlertDeduplicator(alert_store))
    body = [
        product_record("LOW-NEW", current_stock=2, minimum_stock=5),
        product_record("OK", current_stock=50, minimum_stock=5),
        product_record("LOW-OLD", current_stock=1, minimum_stock=10),
    ]

    result = asyncio.run(service.upload(body))
    again = asyncio.run(service.upload(body))

    assert (result.created, result.updated) == (2, 1)
    assert (again.updated, again.failed) == (3, 0)
    alerted = {a["entity_id"] for a in alert_store.alerts}
    assert alerted == {
        product_store.by_key("LOW-NEW")["idfinal_product"],
        product_store.by_key("LOW-OLD")["idfinal_product"],
    }
    assert len(alert_store.alerts) == 2


def test_alert_failure_does_not_change_the_result(product_store, alert_store):
    alert_store.fail = True
    service = BulkUploadService(PRODUCT_BULK, product_store, AlertDeduplicator(alert_store))

    result = asyncio.run(service.upload([product_record("LOW", current_stock=0, minimum_stock=5)]))

    assert (result.created, result.failed) == (1, 0)
    assert alert_store.alerts == []


def test_materials_are_keyed_by_code(material_store):
    service = BulkUploadService(MATERIAL_BULK, material_store)
    body = {
        "materials": [
            {
                "material_name": "Plátano verde",
                "material_code": "MP-001",
                "material_type": "raw",
                "unit_of_measure": "kg",
                "cost_per_unit": 0.45,
                "idorigin": "7f1d2c1e-5b0a-4e38-9a5a-3f6a0c9d1e01",
            },
            {
                "material_name": "Funda 100g",
                "material_code": "EMP-001",
                "material_type": "box",
                "unit_of_measure": "u",
                "cost_per_unit": 0.02,
                "idorigin": "7f1d2c1e-5b0a-4e38-9a5a-3f6a0c9d1e01",
            },
        ]
    }

    result = asyncio.run(service.upload(body))

    assert (result.created, result.failed) == (1, 1)
    assert result.errors[0].key == "EMP-001"
    assert result.errors[0].error.startswith("Validation: material_type")


def test_clients_match_existing_rows_by_email(client_store):
    existing = client_store.seed(ruc_cedula="0999999999", email="ana@example.com", client_name="Ana")
    service = BulkUploadService(CLIENT_BULK, client_store)
    body = [
        {
            "client_name": "Ana Pérez",
            "ruc_cedula": "0911111111",
            "email": "ana@example.com",
            "phone": "0991234567",
            "address": "",
        }
    ]

    result = asyncio.run(service.upload(body))

    assert result.updated == 1
    assert result.records[0]["idclient"] == existing["idclient"]
    assert client_store.rows[existing["idclient"]]["ruc_cedula"] == "0911111111"
    assert client_store.rows[existing["idclient"]]["address"] is None
