"""Repository for client operations."""

from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.client.models import Client
from components.client import schemas
from components.report.models import Report


class ClientRepository:
    """Repository for client operations, scoped to one account."""

    def __init__(self, session: AsyncSession, user_id: int):
        """Initialize repository with database session and account id."""
        self.session = session
        self.user_id = user_id

    async def get_all(self) -> List[Client]:
        """Get the account's clients, newest first."""
        result = await self.session.execute(
            select(Client)
            .where(Client.user_id == self.user_id)
            .order_by(Client.created_at.desc(), Client.id.desc())
        )
        return list(result.scalars().all())

    async def get_by_id(self, client_id: int) -> Optional[Client]:
        """Get client by ID."""
        result = await self.session.execute(
            select(Client).where(Client.id == client_id, Client.user_id == self.user_id)
        )
        return result.scalar_one_or_none()

    async def create(self, client: schemas.ClientCreate) -> Client:
        """Create a new client."""
        db_client = Client(
            user_id=self.user_id,
            name=client.name,
            hourly_rate=client.hourly_rate,
        )
        self.session.add(db_client)
        await self.session.commit()
        await self.session.refresh(db_client)
        return db_client

    async def update(self, client_id: int, client: schemas.ClientUpdate) -> Optional[Client]:
        """Update client by ID.

        Renaming a client also rewrites the client name denormalized on its
        reports.
        """
        db_client = await self.get_by_id(client_id)
        if not db_client:
            return None

        if client.name is not None:
            db_client.name = client.name
            result = await self.session.execute(
                select(Report).where(Report.client_id == client_id)
            )
            for report in result.scalars().all():
                report.client_name = client.name
        if client.hourly_rate is not None:
            db_client.hourly_rate = client.hourly_rate

        await self.session.commit()
        await self.session.refresh(db_client)
        return db_client

    async def delete(self, client_id: int) -> bool:
        """Delete client by ID; its reports go with it."""
        db_client = await self.get_by_id(client_id)
        if not db_client:
            return False

        await self.session.delete(db_client)
        await self.session.commit()
        return True
