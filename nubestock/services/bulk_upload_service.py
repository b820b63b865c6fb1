"""
Bulk upload pipeline shared by products, materials and clients.

normalize body -> validate each record -> reconcile -> low-stock alerts.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Type

from pydantic import BaseModel, ValidationError

from nubestock.core.config import settings
from nubestock.errors import BulkPayloadError
from nubestock.schemas.client import ClientCreate
from nubestock.schemas.material import MaterialCreate
from nubestock.schemas.product import ProductCreate
from nubestock.services.alert_deduplicator import AlertDeduplicator, LowStockCandidate
from nubestock.services.batch_reconciler import (
    BatchReconciler,
    BatchResult,
    ReconciliationOutcome,
    UpsertCandidate,
    UpsertStore,
)

logger = logging.getLogger(__name__)

GENERIC_WRAPPER_KEYS = ("items", "data", "records")


@dataclass(frozen=True)
class BulkEntitySpec:
    """What varies between the bulk endpoints."""

    label: str
    create_schema: Type[BaseModel]
    key_field: str
    name_field: str
    wrapper_keys: Tuple[str, ...]
    secondary_field: Optional[str] = None
    insert_defaults: Dict[str, Any] = field(default_factory=lambda: {"isactive": True})
    low_stock: Optional[Callable[[Dict[str, Any]], Optional[LowStockCandidate]]] = None


PRODUCT_BULK = BulkEntitySpec(
    label="product",
    create_schema=ProductCreate,
    key_field="sku",
    name_field="product_name",
    wrapper_keys=("products",),
    low_stock=LowStockCandidate.from_product_row,
)

MATERIAL_BULK = BulkEntitySpec(
    label="material",
    create_schema=MaterialCreate,
    key_field="material_code",
    name_field="material_name",
    wrapper_keys=("materials",),
)

CLIENT_BULK = BulkEntitySpec(
    label="client",
    create_schema=ClientCreate,
    key_field="ruc_cedula",
    name_field="client_name",
    wrapper_keys=("clients",),
    secondary_field="email",
)


def normalize_bulk_body(body: Any, wrapper_keys: Sequence[str], max_records: int) -> List[Any]:
    """
    Turn a bulk request body into a list of raw records.

    Accepts a JSON array, a string holding a JSON array, or an object
    wrapping the array under one of ``wrapper_keys`` (or items/data/records).
    """
    if isinstance(body, (str, bytes)):
        try:
            body = json.loads(body)
        except ValueError as exc:
            raise BulkPayloadError("Request body is not valid JSON") from exc

    if isinstance(body, dict):
        for key in (*wrapper_keys, *GENERIC_WRAPPER_KEYS):
            if key in body:
                body = body[key]
                break
        else:
            expected = ", ".join((*wrapper_keys, *GENERIC_WRAPPER_KEYS))
            raise BulkPayloadError(f"Expected an array of records or an object with one of: {expected}")

    if not isinstance(body, list):
        raise BulkPayloadError("An array of records is required")
    if not body:
        raise BulkPayloadError("An array of records is required")
    if len(body) > max_records:
        raise BulkPayloadError(
            f"The maximum number of records per upload is {max_records}",
            errors=[{"field": "body", "message": f"received {len(body)} records"}],
        )
    return body


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()))
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return "Validation: " + ", ".join(parts)


class BulkUploadService:
    """Run one bulk submission through validation, reconciliation and alerting."""

    def __init__(
        self,
        spec: BulkEntitySpec,
        store: UpsertStore,
        alerts: Optional[AlertDeduplicator] = None,
        *,
        max_records: Optional[int] = None,
    ):
        self.spec = spec
        self.reconciler = BatchReconciler(store, entity_label=spec.label)
        self.alerts = alerts
        self.max_records = max_records or settings.BULK_MAX_RECORDS

    async def upload(self, body: Any) -> BatchResult:
        records = normalize_bulk_body(body, self.spec.wrapper_keys, self.max_records)
        logger.info("Bulk %s upload received: %s record(s)", self.spec.label, len(records))

        candidates, rejected = self.build_candidates(records)
        result = await self.reconciler.reconcile(candidates, rejected)

        if self.alerts is not None and self.spec.low_stock is not None:
            low_stock = [
                candidate
                for candidate in (self.spec.low_stock(row) for row in result.written_records())
                if candidate is not None
            ]
            if low_stock:
                await self.alerts.create_missing(low_stock)

        return result

    def build_candidates(
        self,
        records: Sequence[Any],
    ) -> Tuple[List[UpsertCandidate], List[ReconciliationOutcome]]:
        candidates: List[UpsertCandidate] = []
        rejected: List[ReconciliationOutcome] = []

        for index, raw in enumerate(records):
            if not isinstance(raw, dict):
                rejected.append(ReconciliationOutcome.failed(index, "N/A", "Validation: record must be an object"))
                continue
            try:
                validated = self.spec.create_schema.model_validate(raw)
            except ValidationError as exc:
                rejected.append(
                    ReconciliationOutcome.failed(
                        index,
                        str(raw.get(self.spec.key_field) or "N/A"),
                        _validation_message(exc),
                        name=str(raw.get(self.spec.name_field) or "N/A"),
                    )
                )
                continue
            candidates.append(self._candidate(index, validated))

        return candidates, rejected

    def _candidate(self, index: int, validated: BaseModel) -> UpsertCandidate:
        full = validated.model_dump()
        values = validated.model_dump(exclude_unset=True)
        # A missing flag must not null the column on update
        for column in self.spec.insert_defaults:
            if values.get(column) is None:
                values.pop(column, None)

        insert_values = dict(full)
        for column, default in self.spec.insert_defaults.items():
            if insert_values.get(column) is None:
                insert_values[column] = default

        secondary = full.get(self.spec.secondary_field) if self.spec.secondary_field else None
        return UpsertCandidate(
            origin_index=index,
            key=str(full[self.spec.key_field]),
            values=values,
            name=str(full.get(self.spec.name_field) or ""),
            secondary_key=str(secondary) if secondary else None,
            insert_values=insert_values,
        )
