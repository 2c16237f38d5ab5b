"""
Telecaller Domain Models
"""
from pydantic import BaseModel, Field, model_validator
from typing import Optional
from enum import Enum


class TelecallerRole(str, Enum):
    """Roles stored on the users table"""
    EMPLOYEE = "employee"
    MANAGER = "manager"
    ADMIN = "admin"
    INTERN = "intern"


class Telecaller(BaseModel):
    """A user who can be assigned leads to call"""
    id: str
    email: str
    name: Optional[str] = None
    role: str = TelecallerRole.EMPLOYEE.value
    status: str = "active"

    @model_validator(mode="after")
    def _default_name(self) -> "Telecaller":
        if not self.name:
            self.name = self.email
        return self


class TelecallerWorkload(Telecaller):
    """Telecaller enriched with the live count of their open leads"""
    active_leads: int = Field(default=0, ge=0)
