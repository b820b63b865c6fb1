"""
Pydantic schemas for bulk upload responses.

The shape is shared by products, materials and clients; only the natural
key (sku, material_code, ruc_cedula) behind ``key`` differs.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from nubestock.schemas.base import ApiResponse


class BulkError(BaseModel):
    index: int  # 1-based position in the submitted array
    key: str
    name: str
    error: str


class BulkUploadData(BaseModel):
    total: int
    created: int
    updated: int
    failed: int
    records: List[Dict[str, Any]]
    errors: List[BulkError]


class BulkUploadResponse(ApiResponse[BulkUploadData]):
    data: Optional[BulkUploadData] = None
