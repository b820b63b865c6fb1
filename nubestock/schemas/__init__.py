"""
Pydantic schemas for request validation and response shaping.
"""

from nubestock.schemas.base import ApiResponse, AuditedRead, PaginatedResponse, Pagination
from nubestock.schemas.bulk import BulkError, BulkUploadData, BulkUploadResponse
from nubestock.schemas.product import ProductCreate, ProductUpdate, ProductRead
from nubestock.schemas.material import MaterialCreate, MaterialRead
from nubestock.schemas.client import ClientCreate, ClientUpdate, ClientRead
from nubestock.schemas.alert import AlertUpdate, AlertRead

__all__ = [
    "ApiResponse",
    "AuditedRead",
    "Pagination",
    "PaginatedResponse",
    "BulkError",
    "BulkUploadData",
    "BulkUploadResponse",
    "ProductCreate",
    "ProductUpdate",
    "ProductRead",
    "MaterialCreate",
    "MaterialRead",
    "ClientCreate",
    "ClientUpdate",
    "ClientRead",
    "AlertUpdate",
    "AlertRead",
]
