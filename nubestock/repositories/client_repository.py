"""
Client repository - database operations for Client.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from nubestock.models.client import Client
from nubestock.utils.formatting import utc_now


class ClientRepository:
    """Repository for Client database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(
        self,
        search: Optional[str] = None,
        isactive: Optional[bool] = None,
    ) -> List[Client]:
        """List clients. Search matches name, business name, RUC and email."""
        query = select(Client)

        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(
                    Client.client_name.ilike(pattern),
                    Client.business_name.ilike(pattern),
                    Client.ruc_cedula.ilike(pattern),
                    Client.email.ilike(pattern),
                )
            )
        if isactive is not None:
            query = query.where(Client.isactive.is_(isactive))

        result = await self.db.execute(query.order_by(Client.client_name.asc()))
        return list(result.scalars().all())

    async def get_by_id(self, client_id: UUID) -> Optional[Client]:
        result = await self.db.execute(select(Client).where(Client.idclient == client_id))
        return result.scalar_one_or_none()

    async def get_by_ruc(self, ruc_cedula: str) -> Optional[Client]:
        result = await self.db.execute(select(Client).where(Client.ruc_cedula == ruc_cedula))
        return result.scalar_one_or_none()

    async def create(self, data: Dict[str, Any]) -> Client:
        client = Client(**data)
        self.db.add(client)
        await self.db.flush()
        await self.db.refresh(client)
        return client

    async def update(self, client: Client, data: Dict[str, Any]) -> Client:
        for field, value in data.items():
            setattr(client, field, value)
        client.modificationdate = utc_now()
        await self.db.flush()
        await self.db.refresh(client)
        return client

    async def delete(self, client: Client) -> None:
        await self.db.delete(client)
        await self.db.flush()
