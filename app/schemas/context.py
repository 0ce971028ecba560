from uuid import UUID

from pydantic import BaseModel, ConfigDict


class RequestContext(BaseModel):
    """Tenant and caller identity passed explicitly to every data access."""

    model_config = ConfigDict(frozen=True)

    organization_id: UUID
    user_id: UUID

    @property
    def scope_key(self) -> str:
        return f"{self.organization_id}:{self.user_id}"
