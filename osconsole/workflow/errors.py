# osconsole/workflow/errors.py
"""
Помилки workflow-ядра.

Кожна помилка стосується лише однієї операції й не змінює попередній стан.
`status_code` і `code` використовує обробник у main.py.
"""
from __future__ import annotations

from typing import Iterable


class WorkflowError(Exception):
    status_code = 400
    code = "workflow_error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message()
        super().__init__(self.message)

    def default_message(self) -> str:
        return self.code


class PermissionDenied(WorkflowError):
    status_code = 403
    code = "permission_denied"

    def default_message(self) -> str:
        return "Forbidden"


class InvalidTarget(WorkflowError):
    status_code = 409
    code = "invalid_target"

    def __init__(self, target_status_id: str, message: str | None = None):
        self.target_status_id = target_status_id
        super().__init__(message or f"Status '{target_status_id}' is not an allowed transition")


class MissingRequiredNote(WorkflowError):
    status_code = 422
    code = "missing_required_note"

    def default_message(self) -> str:
        return "Technical solution is required for this status"


class IncompleteServiceConfirmation(WorkflowError):
    status_code = 422
    code = "incomplete_service_confirmation"

    def __init__(self, missing_service_ids: Iterable[str]):
        self.missing_service_ids = list(missing_service_ids)
        super().__init__("Confirm all contracted services before moving on")


class OrderFinalized(WorkflowError):
    status_code = 409
    code = "order_finalized"

    def default_message(self) -> str:
        return "Service order is finalized"


class ConfigurationError(WorkflowError):
    status_code = 500
    code = "configuration_error"


class BackendError(WorkflowError):
    """Будь-яка відмова зовнішнього API (мережа, валідація, невідомий id)."""
    status_code = 502
    code = "backend_error"

    def __init__(self, message: str | None = None, *, upstream_status: int | None = None,
                 upstream_detail: str | None = None):
        self.upstream_status = upstream_status
        self.upstream_detail = upstream_detail
        super().__init__(message)

    def default_message(self) -> str:
        return "Backend request failed"


class NotFound(BackendError):
    status_code = 404
    code = "not_found"

    def default_message(self) -> str:
        return "Not found"


class Unauthorized(BackendError):
    status_code = 401
    code = "unauthorized"

    def default_message(self) -> str:
        return "Invalid or expired token"
