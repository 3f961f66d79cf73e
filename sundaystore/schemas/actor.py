import enum

from pydantic import BaseModel, Field


class ActorRole(str, enum.Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    CHURCH_ADMIN = "church_admin"
    DIOCESE_ADMIN = "diocese_admin"
    SUPER_ADMIN = "super_admin"


class Actor(BaseModel):
    """Authenticated caller as forwarded by the gateway"""

    id: int = Field(..., description="User ID")
    role: ActorRole = Field(..., description="Resolved role")

    @property
    def is_manager(self) -> bool:
        return self.role != ActorRole.STUDENT

    @property
    def is_church_admin(self) -> bool:
        return self.role in (
            ActorRole.CHURCH_ADMIN,
            ActorRole.DIOCESE_ADMIN,
            ActorRole.SUPER_ADMIN,
        )
