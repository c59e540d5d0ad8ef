# osconsole/schemas/auth.py
from __future__ import annotations

from typing import Optional

from pydantic import Field

from osconsole.schemas.common import CamelModel


class RoleOut(CamelModel):
    id: str
    name: str
    # {"os": ["read", "update"], "adminSettings": ["all"]}
    permissions: dict[str, list[str]] = Field(default_factory=dict)


class MeOut(CamelModel):
    id: str
    name: str
    email: str
    role_id: Optional[str] = None
    role: Optional[RoleOut] = None
