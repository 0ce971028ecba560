from typing import Optional
from uuid import UUID

from sqlalchemy import select

from app.models.organization import Organization
from app.repositories.base import BaseRepository


class OrganizationRepository(BaseRepository):
    """Encapsulates queries against the ``organizations`` table."""

    async def get_timezone(self, organization_id: UUID) -> Optional[str]:
        """Return the configured IANA timezone name, or ``None`` if unset."""
        result = await self._db.execute(
            select(Organization.timezone).where(Organization.id == organization_id)
        )
        return result.scalar_one_or_none()
