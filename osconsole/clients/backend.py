# osconsole/clients/backend.py
"""
Клієнт зовнішнього REST API (ордери, статуси, клієнти, ролі, налаштування).

Бекенд говорить snake_case: тіла запитів і відповіді проганяємо через
keys_to_snake. Будь-яка відмова (мережа, 4xx/5xx, кривий JSON) -> BackendError,
без автоматичних повторів.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from osconsole.core.casing import keys_to_camel, keys_to_snake
from osconsole.core.config import settings
from osconsole.schemas.auth import MeOut, RoleOut
from osconsole.schemas.orders import (
    Client,
    EditLogEntry,
    LogEntry,
    ProvidedService,
    ServiceOrder,
)
from osconsole.schemas.settings import EmailSettings
from osconsole.schemas.statuses import Status, StatusIn
from osconsole.workflow.errors import BackendError, NotFound, Unauthorized

log = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_session: requests.Session | None = None


def _get_session() -> requests.Session:
    global _session
    if _session is None:
        _session = requests.Session()
    return _session


def _detail(resp: requests.Response) -> str | None:
    try:
        data = resp.json()
    except ValueError:
        return (resp.text or "")[:500] or None
    if isinstance(data, dict):
        for key in ("message", "detail", "error"):
            if data.get(key):
                return str(data[key])
    return None


def _one(model: type[M], data: Any) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        log.warning("backend_malformed", extra={"model": model.__name__, "errors": e.error_count()})
        raise BackendError("Malformed backend response") from e


def _many(model: type[M], data: Any) -> list[M]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise BackendError(f"Malformed backend response: expected a list of {model.__name__}")
    return [_one(model, item) for item in data]


class BackendClient:
    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
        request_id: str | None = None,
    ) -> None:
        self.base_url = (base_url or settings.backend_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.backend_timeout_sec
        self.session = session or _get_session()
        self.token = token
        self.request_id = request_id

    # ---- транспорт ----

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if self.request_id:
            headers["X-Request-ID"] = self.request_id
        return headers

    def _request(self, method: str, path: str, *, json: Any = None,
                 params: Optional[dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        body = keys_to_snake(json) if json is not None else None
        try:
            resp = self.session.request(
                method,
                url,
                json=body,
                params=params,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.warning("backend_unreachable", extra={"method": method, "path": path, "error": str(e)})
            raise BackendError() from e

        if resp.status_code == 401:
            raise Unauthorized(upstream_status=401, upstream_detail=_detail(resp))
        if resp.status_code == 404:
            raise NotFound(upstream_status=404, upstream_detail=_detail(resp))
        if resp.status_code >= 400:
            detail = _detail(resp)
            log.warning(
                "backend_error",
                extra={"method": method, "path": path, "status": resp.status_code, "detail": detail},
            )
            raise BackendError(upstream_status=resp.status_code, upstream_detail=detail)

        if resp.status_code == 204 or not resp.content:
            return None
        try:
            data = resp.json()
        except ValueError as e:
            raise BackendError("Malformed backend response", upstream_status=resp.status_code) from e
        return keys_to_snake(data)

    # ---- auth ----

    def get_me(self) -> MeOut:
        return _one(MeOut, self._camel_permissions(self._request("GET", "/auth/me")))

    def get_role(self, role_id: str) -> RoleOut:
        return _one(RoleOut, self._camel_permissions(self._request("GET", f"/roles/{role_id}")))

    @staticmethod
    def _camel_permissions(data: Any) -> Any:
        # ключі мапи прав: імена ресурсів UI (adminSettings), а не поля
        if not isinstance(data, dict):
            return data
        if isinstance(data.get("permissions"), dict):
            data = {**data, "permissions": keys_to_camel(data["permissions"])}
        if isinstance(data.get("role"), dict):
            data = {**data, "role": BackendClient._camel_permissions(data["role"])}
        return data

    # ---- статуси ----

    def list_statuses(self) -> list[Status]:
        return _many(Status, self._request("GET", "/statuses"))

    def create_status(self, payload: StatusIn) -> Status:
        return _one(Status, self._request("POST", "/statuses", json=payload.model_dump()))

    def update_status(self, status_id: str, payload: StatusIn) -> Status:
        return _one(Status, self._request("PUT", f"/statuses/{status_id}", json=payload.model_dump()))

    def delete_status(self, status_id: str) -> None:
        self._request("DELETE", f"/statuses/{status_id}")

    # ---- ордери ----

    def list_orders(self) -> list[ServiceOrder]:
        return _many(ServiceOrder, self._request("GET", "/os"))

    def get_order(self, order_id: str) -> ServiceOrder:
        return _one(ServiceOrder, self._request("GET", f"/os/{order_id}"))

    def create_order(self, payload: dict[str, Any]) -> ServiceOrder:
        return _one(ServiceOrder, self._request("POST", "/os", json=payload))

    def update_order_status(
        self,
        order_id: str,
        new_status_id: str,
        observation: str | None,
        *,
        confirmed_service_ids: list[str] | None = None,
        technical_solution: str | None = None,
    ) -> ServiceOrder:
        body: dict[str, Any] = {"new_status_id": new_status_id, "observation": observation}
        if confirmed_service_ids is not None:
            body["confirmed_service_ids"] = list(confirmed_service_ids)
        if technical_solution is not None:
            body["technical_solution"] = technical_solution
        return _one(ServiceOrder, self._request("PUT", f"/os/{order_id}/status", json=body))

    def update_order(self, order_id: str, fields: dict[str, Any]) -> ServiceOrder:
        return _one(ServiceOrder, self._request("PUT", f"/os/{order_id}", json=fields))

    # ---- довідники ----

    def get_client(self, client_id: str) -> Client:
        return _one(Client, self._request("GET", f"/clients/{client_id}"))

    def list_services(self) -> list[ProvidedService]:
        return _many(ProvidedService, self._request("GET", "/services"))

    # ---- налаштування email ----

    def get_email_settings(self) -> EmailSettings:
        return _one(EmailSettings, self._request("GET", "/settings/email"))

    def update_email_settings(self, payload: EmailSettings) -> EmailSettings:
        body = payload.model_dump(exclude_none=True)
        return _one(EmailSettings, self._request("PUT", "/settings/email", json=body))


# поля, які бекенд приймає в PUT /os/{id}
_WIRE_DETAIL_FIELDS = (
    "client_id",
    "collaborator",
    "equipment",
    "reported_problem",
    "technical_solution",
    "confirmed_service_ids",
)


def changed_wire_fields(before: ServiceOrder, after: ServiceOrder) -> dict[str, Any]:
    old = before.model_dump(mode="json", include=set(_WIRE_DETAIL_FIELDS))
    new = after.model_dump(mode="json", include=set(_WIRE_DETAIL_FIELDS))
    return {f: new[f] for f in _WIRE_DETAIL_FIELDS if old.get(f) != new.get(f)}


class BackendOrderStore:
    """OrderStore поверх BackendClient: статус і деталі окремими виклики API."""

    def __init__(self, client: BackendClient) -> None:
        self.client = client

    def persist_transition(self, before: ServiceOrder, after: ServiceOrder, entry: LogEntry) -> ServiceOrder:
        technical_solution = None
        if after.technical_solution != before.technical_solution:
            technical_solution = after.technical_solution
        return self.client.update_order_status(
            before.id,
            entry.to_status_id,
            entry.observation,
            confirmed_service_ids=after.confirmed_service_ids,
            technical_solution=technical_solution,
        )

    def persist_details(self, before: ServiceOrder, after: ServiceOrder,
                        entry: Optional[EditLogEntry]) -> ServiceOrder:
        fields = changed_wire_fields(before, after)
        if entry is None or not fields:
            return before
        if entry.observation:
            fields["observation"] = entry.observation
        return self.client.update_order(before.id, fields)
