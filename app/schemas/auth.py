from pydantic import BaseModel, Field
from typing import List, Optional
import enum


class Role(str, enum.Enum):
    EMPLOYEE = "employee"
    MANAGER = "manager"
    ADMIN = "admin"


class SessionContext(BaseModel):
    """
    Who is calling, resolved from the bearer token.
    Passed explicitly to handlers and services instead of a global user store.
    """
    employee_id: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    team_id: Optional[str] = None
    roles: List[Role] = Field(default_factory=lambda: [Role.EMPLOYEE])

    @property
    def is_admin(self) -> bool:
        return Role.ADMIN in self.roles

    @property
    def is_manager(self) -> bool:
        """Admins can do everything a manager can."""
        return Role.MANAGER in self.roles or self.is_admin

    @property
    def name(self) -> str:
        return self.display_name or self.email or self.employee_id
