"""Catalog API client: one HTTP call per operation, outcomes wrapped in ResourceResult."""
import logging
from typing import Any, Callable, List, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from carcatalog.config import (
    CATALOG_API_BASE_URL,
    CATALOG_API_TOKEN,
    CATALOG_HTTP_TIMEOUT,
    CATALOG_RESOURCE,
    USER_AGENT,
)
from carcatalog.core.errors import ContractViolation
from carcatalog.core.result import ResourceResult, Success, classify, from_status
from carcatalog.models.record import Record
from carcatalog.models.wire import CarPayload

logger = logging.getLogger(__name__)

_CAR_LIST = TypeAdapter(List[CarPayload])


def _build_headers(bearer_token: Optional[str]) -> dict:
    headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    if bearer_token:
        headers["Authorization"] = f"Bearer {bearer_token}"
    return headers


def _require_id(record_id: Optional[str], operation: str) -> str:
    if not record_id:
        raise ContractViolation(f"{operation} requires a persisted record id")
    return record_id


class RecordClient:
    """CRUD over the catalog resource. Never retries, never caches."""

    def __init__(self, http: httpx.Client, resource: str = CATALOG_RESOURCE) -> None:
        self._http = http
        self._resource = resource.strip("/")

    @classmethod
    def from_config(cls, bearer_token: Optional[str] = None) -> "RecordClient":
        """Build a client against CATALOG_API_BASE_URL; token is the signed-in user's, if any."""
        http = httpx.Client(
            base_url=CATALOG_API_BASE_URL,
            timeout=CATALOG_HTTP_TIMEOUT,
            headers=_build_headers(bearer_token or CATALOG_API_TOKEN),
        )
        return cls(http)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "RecordClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _path(self, record_id: Optional[str] = None) -> str:
        if record_id is None:
            return f"/{self._resource}"
        return f"/{self._resource}/{record_id}"

    def _safe_call(
        self,
        operation: str,
        call: Callable[[], httpx.Response],
        parse: Callable[[httpx.Response], Any],
    ) -> ResourceResult:
        """Run one request and classify its outcome; nothing but results leaves here."""
        try:
            response = call()
        except Exception as e:
            result = classify(e)
            logger.warning("%s failed: %s (%s)", operation, result.message, e)
            return result
        if not response.is_success:
            logger.warning("%s failed: HTTP %s", operation, response.status_code)
            return from_status(response.status_code)
        try:
            value = parse(response)
        except (ValueError, ValidationError) as e:
            logger.warning("%s: unreadable body with HTTP %s (%s)", operation, response.status_code, e)
            return from_status(response.status_code)
        if value is None:
            return from_status(response.status_code)
        return Success(value)

    @staticmethod
    def _parse_record(response: httpx.Response) -> Optional[Record]:
        if not response.content:
            return None
        body = response.json()
        if body is None:
            return None
        return CarPayload.model_validate(body).to_record()

    @staticmethod
    def _parse_records(response: httpx.Response) -> Optional[List[Record]]:
        if not response.content:
            return None
        return [p.to_record() for p in _CAR_LIST.validate_python(response.json())]

    def list(self) -> ResourceResult:
        return self._safe_call(
            "list",
            lambda: self._http.get(self._path()),
            self._parse_records,
        )

    def create(self, record: Record) -> ResourceResult:
        body = CarPayload.from_record(record).to_wire()
        return self._safe_call(
            "create",
            lambda: self._http.post(self._path(), json=body),
            self._parse_record,
        )

    def fetch(self, record_id: str) -> ResourceResult:
        _require_id(record_id, "fetch")
        return self._safe_call(
            "fetch",
            lambda: self._http.get(self._path(record_id)),
            self._parse_record,
        )

    def update(self, record_id: str, record: Record) -> ResourceResult:
        """PATCH the record. The caller must already know the record is persisted."""
        _require_id(record_id, "update")
        body = CarPayload.from_record(record.replace(id=record_id)).to_wire()
        return self._safe_call(
            "update",
            lambda: self._http.patch(self._path(record_id), json=body),
            self._parse_record,
        )

    def delete(self, record_id: str) -> ResourceResult:
        _require_id(record_id, "delete")
        return self._safe_call(
            "delete",
            lambda: self._http.delete(self._path(record_id)),
            lambda response: (),
        )
