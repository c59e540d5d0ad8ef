# osconsole/schemas/settings.py
from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field

from osconsole.schemas.common import CamelModel

SmtpSecurity = Literal["none", "ssl", "tls", "ssltls", "starttls"]

PASSWORD_MASK = "********"


class EmailSettings(CamelModel):
    smtp_server: str = Field(..., min_length=1, max_length=255)
    smtp_port: Optional[int] = Field(default=None, ge=1, le=65535)
    smtp_security: Optional[SmtpSecurity] = None
    sender_email: Optional[str] = Field(default=None, max_length=255)
    smtp_password: Optional[str] = None

    def masked(self) -> "EmailSettings":
        if not self.smtp_password:
            return self
        return self.model_copy(update={"smtp_password": PASSWORD_MASK})
