"""
HTTP tests for the bulk upload endpoints.

The session and upload services are replaced with in-memory versions, so
these run without a database.
"""

import pytest
from fastapi.testclient import TestClient

from nubestock.core.dependencies import (
    get_client_bulk_service,
    get_material_bulk_service,
    get_product_bulk_service,
)
from nubestock.db.session import get_db
from nubestock.main import app
from nubestock.services.alert_deduplicator import AlertDeduplicator
from nubestock.services.bulk_upload_service import (
    CLIENT_BULK,
    MATERIAL_BULK,
    PRODUCT_BULK,
    BulkUploadService,
)
from tests.conftest import (
    FakeSession,
    InMemoryAlertStore,
    InMemoryUpsertStore,
    product_record,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def stores():
    return {
        "session": FakeSession(),
        "products": InMemoryUpsertStore(key_column="sku", identity_column="idfinal_product"),
        "materials": InMemoryUpsertStore(key_column="material_code", identity_column="idmaterial"),
        "clients": InMemoryUpsertStore(
            key_column="ruc_cedula",
            identity_column="idclient",
            secondary_column="email",
        ),
        "alerts": InMemoryAlertStore(),
    }


@pytest.fixture
def client(stores):
    async def override_get_db():
        yield stores["session"]

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_product_bulk_service] = lambda: BulkUploadService(
        PRODUCT_BULK,
        stores["products"],
        AlertDeduplicator(stores["alerts"]),
    )
    app.dependency_overrides[get_material_bulk_service] = lambda: BulkUploadService(
        MATERIAL_BULK,
        stores["materials"],
    )
    app.dependency_overrides[get_client_bulk_service] = lambda: BulkUploadService(
        CLIENT_BULK,
        stores["clients"],
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_all_new_products_answer_201(client, stores):
    response = client.post("/products/bulk", json=[product_record("SKU-A"), product_record("SKU-B")])

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Processed 2 product(s): 2 created, 0 updated, 0 failed"
    assert [r["action"] for r in body["data"]["records"]] == ["created", "created"]
    assert body["data"]["errors"] == []
    assert stores["session"].commits == 1


def test_partial_failure_answers_207(client):
    response = client.post(
        "/products/bulk",
        json={"products": [product_record("SKU-A"), product_record("SKU-B", unit_price=-1), product_record("SKU-A")]},
    )

    assert response.status_code == 207
    data = response.json()["data"]
    assert (data["total"], data["created"], data["updated"], data["failed"]) == (3, 1, 0, 2)
    assert [e["index"] for e in data["errors"]] == [2, 3]
    assert data["errors"][1]["error"] == "duplicate key in batch"


def test_total_failure_answers_400(client):
    response = client.post("/products/bulk", json=[{"sku": "X"}, {"sku": "Y"}])

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["data"]["failed"] == 2


def test_resubmission_updates_instead_of_creating(client):
    records = [product_record("SKU-A"), product_record("SKU-B")]
    client.post("/products/bulk", json=records)

    response = client.post("/products/bulk", json=records)

    assert response.status_code == 201
    data = response.json()["data"]
    assert (data["created"], data["updated"]) == (0, 2)


def test_low_stock_upload_creates_alerts(client, stores):
    client.post("/products/bulk", json=[product_record("LOW", current_stock=1, minimum_stock=5)])

    assert len(stores["alerts"].alerts) == 1
    assert stores["alerts"].alerts[0]["alert_title"] == "Stock bajo: Producto LOW"


def test_unusable_body_answers_400_with_envelope(client, stores):
    response = client.post("/products/bulk", json={"unexpected": []})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "timestamp" in body
    assert stores["products"].lookups == 0


def test_more_than_1000_records_answers_400(client, stores):
    response = client.post("/materials/bulk", json=[{"material_code": f"M-{i}"} for i in range(1001)])

    assert response.status_code == 400
    assert stores["materials"].lookups == 0


def test_client_bulk_matches_on_email(client, stores):
    existing = stores["clients"].seed(ruc_cedula="0999999999", email="ana@example.com", client_name="Ana")

    response = client.post(
        "/clients/bulk",
        json={
            "clients": [
                {
                    "client_name": "Ana Pérez",
                    "ruc_cedula": "0911111111",
                    "email": "ana@example.com",
                    "phone": "0991234567",
                }
            ]
        },
    )

    assert response.status_code == 201
    record = response.json()["data"]["records"][0]
    assert record["action"] == "updated"
    assert record["idclient"] == str(existing["idclient"])


def test_request_validation_errors_use_the_envelope(client):
    response = client.post(
        "/products/stock-operation",
        json={"idfinal_product": "not-a-uuid", "operation_type": "sideways", "quantity": 0},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid input data"
    fields = {error["field"] for error in body["errors"]}
    assert {"idfinal_product", "operation_type", "quantity"} <= fields


def test_commit_failure_answers_400_and_raises_no_alerts(client, stores):
    stores["products"].fail_commit = True

    response = client.post("/products/bulk", json=[product_record("SKU-LOW", current_stock=0, minimum_stock=5)])

    assert response.status_code == 400
    data = response.json()["data"]
    assert (data["created"], data["failed"]) == (0, 1)
    assert data["errors"][0]["error"].startswith("TRANSACTION Error:")
    assert stores["products"].rows == {}
    assert stores["alerts"].alerts == []
