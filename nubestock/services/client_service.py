"""
Client business logic service.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from nubestock.errors import ConflictError, NotFoundError
from nubestock.models.client import Client
from nubestock.repositories.client_repository import ClientRepository
from nubestock.schemas.client import ClientCreate, ClientUpdate

logger = logging.getLogger(__name__)

DUPLICATE_RUC_MESSAGE = "A client with this RUC/cedula already exists"


class ClientService:
    """Service for client business logic."""

    def __init__(self, db: AsyncSession):
        self.repository = ClientRepository(db)

    async def list_clients(
        self,
        search: Optional[str] = None,
        isactive: Optional[bool] = None,
    ) -> List[Client]:
        return await self.repository.list(search=search, isactive=isactive)

    async def get_client(self, client_id: UUID) -> Client:
        client = await self.repository.get_by_id(client_id)
        if not client:
            raise NotFoundError("Client not found")
        return client

    async def create_client(self, data: ClientCreate) -> Client:
        if await self.repository.get_by_ruc(data.ruc_cedula):
            raise ConflictError(DUPLICATE_RUC_MESSAGE)

        values = data.model_dump()
        if values.get("isactive") is None:
            values["isactive"] = True
        try:
            client = await self.repository.create(values)
        except IntegrityError as exc:
            raise ConflictError(DUPLICATE_RUC_MESSAGE) from exc

        logger.info("Client created: %s", client.ruc_cedula)
        return client

    async def update_client(self, client_id: UUID, data: ClientUpdate) -> Client:
        client = await self.get_client(client_id)

        values = data.model_dump(exclude_unset=True)
        if values.get("isactive") is None:
            values.pop("isactive", None)
        new_ruc = values.get("ruc_cedula")
        if new_ruc and new_ruc != client.ruc_cedula:
            existing = await self.repository.get_by_ruc(new_ruc)
            if existing and existing.idclient != client.idclient:
                raise ConflictError(DUPLICATE_RUC_MESSAGE)

        try:
            return await self.repository.update(client, values)
        except IntegrityError as exc:
            raise ConflictError(DUPLICATE_RUC_MESSAGE) from exc

    async def delete_client(self, client_id: UUID) -> None:
        client = await self.get_client(client_id)
        await self.repository.delete(client)
        logger.info("Client deleted: %s", client.ruc_cedula)
