"""
FastAPI dependencies.

Services are built per request around the request's session; nothing here
is shared between requests.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from nubestock.core.config import settings
from nubestock.db.session import get_db
from nubestock.models.client import Client
from nubestock.models.material import Material
from nubestock.models.product import Product
from nubestock.repositories.alert_repository import AlertRepository
from nubestock.repositories.bulk_upsert_repository import BulkUpsertRepository
from nubestock.services.alert_deduplicator import AlertDeduplicator
from nubestock.services.alert_service import AlertService
from nubestock.services.bulk_upload_service import (
    CLIENT_BULK,
    MATERIAL_BULK,
    PRODUCT_BULK,
    BulkUploadService,
)
from nubestock.services.client_service import ClientService
from nubestock.services.material_service import MaterialService
from nubestock.services.product_service import ProductService

__all__ = [
    "get_db",
    "get_low_stock_alerts",
    "get_product_service",
    "get_material_service",
    "get_client_service",
    "get_alert_service",
    "get_product_bulk_service",
    "get_material_bulk_service",
    "get_client_bulk_service",
]


def get_low_stock_alerts(db: AsyncSession = Depends(get_db)) -> AlertDeduplicator:
    return AlertDeduplicator(AlertRepository(db), priority=settings.LOW_STOCK_ALERT_PRIORITY)


def get_product_service(
    db: AsyncSession = Depends(get_db),
    alerts: AlertDeduplicator = Depends(get_low_stock_alerts),
) -> ProductService:
    return ProductService(db, alerts)


def get_material_service(db: AsyncSession = Depends(get_db)) -> MaterialService:
    return MaterialService(db)


def get_client_service(db: AsyncSession = Depends(get_db)) -> ClientService:
    return ClientService(db)


def get_alert_service(db: AsyncSession = Depends(get_db)) -> AlertService:
    return AlertService(db)


def get_product_bulk_service(
    db: AsyncSession = Depends(get_db),
    alerts: AlertDeduplicator = Depends(get_low_stock_alerts),
) -> BulkUploadService:
    store = BulkUpsertRepository(
        db,
        Product,
        key_column="sku",
        identity_column="idfinal_product",
    )
    return BulkUploadService(PRODUCT_BULK, store, alerts)


def get_material_bulk_service(db: AsyncSession = Depends(get_db)) -> BulkUploadService:
    store = BulkUpsertRepository(
        db,
        Material,
        key_column="material_code",
        identity_column="idmaterial",
    )
    return BulkUploadService(MATERIAL_BULK, store)


def get_client_bulk_service(db: AsyncSession = Depends(get_db)) -> BulkUploadService:
    store = BulkUpsertRepository(
        db,
        Client,
        key_column="ruc_cedula",
        identity_column="idclient",
        secondary_column="email",
    )
    return BulkUploadService(CLIENT_BULK, store)
