"""HTTP client for the Somana host registry API."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, Mapping, TypeVar
from urllib.parse import quote, urlencode, urljoin

import requests

from .models import (
    ErrorBody,
    HealthStatus,
    Host,
    HostCreateRequest,
    HostHeartbeatRequest,
    HostStatus,
    HostUpdateRequest,
)

T = TypeVar("T")

RequestEditor = Callable[[requests.Request], None]

_HOSTS_PATH = "/api/v1/hosts"
_HEALTH_PATH = "/health"


@dataclass
class ApiResponse(Generic[T]):
    """A raw HTTP response with its JSON payload decoded where the API defines one."""

    status_code: int
    reason: str
    headers: Mapping[str, str]
    body: bytes
    data: T | None = None
    error: ErrorBody | None = None
    http_response: requests.Response | None = field(default=None, repr=False)

    @property
    def status(self) -> str:
        """Status line text, such as ``"200 OK"``."""
        if self.http_response is None:
            return ""
        return f"{self.status_code} {self.reason}".rstrip()


def _host_list(payload: Any) -> list[Host]:
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ValueError(f"expected a JSON array of hosts, got {type(payload).__name__}")
    return [Host.from_dict(item) for item in payload]


def _host(payload: Any) -> Host:
    return Host() if payload is None else Host.from_dict(payload)


def _health(payload: Any) -> HealthStatus:
    return HealthStatus() if payload is None else HealthStatus.from_dict(payload)


def _error(payload: Any) -> ErrorBody:
    return ErrorBody() if payload is None else ErrorBody.from_dict(payload)


def _encode(body: Any) -> bytes:
    if hasattr(body, "to_dict"):
        body = body.to_dict()
    elif isinstance(body, Mapping):
        body = dict(body)
    else:
        raise TypeError(f"cannot encode request body of type {type(body).__name__}")
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def _status_text(status: HostStatus | str) -> str:
    return status.value if isinstance(status, HostStatus) else str(status)


class Client:
    """Client for the host registry endpoints of a Somana server."""

    def __init__(
        self,
        server: str,
        session: requests.Session | None = None,
        timeout: float | None = None,
        request_editors: Iterable[RequestEditor] | None = None,
    ) -> None:
        if not server.endswith("/"):
            server += "/"
        self.server = server
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.request_editors: list[RequestEditor] = list(request_editors or ())

    def _url(self, path: str) -> str:
        return urljoin(self.server, "." + path)

    def _call(
        self,
        method: str,
        path: str,
        *,
        query: Mapping[str, str] | None = None,
        body: Any = None,
        data_parsers: Mapping[int, Callable[[Any], Any]],
        error_codes: Iterable[int] = (),
    ) -> ApiResponse[Any]:
        url = self._url(path)
        if query:
            url = f"{url}?{urlencode(query)}"
        request = requests.Request(method, url)
        if body is not None:
            request.data = _encode(body)
            request.headers["Content-Type"] = "application/json"
        for editor in self.request_editors:
            editor(request)

        prepared = self.session.prepare_request(request)
        http_response = self.session.send(prepared, timeout=self.timeout)
        try:
            content = http_response.content
        finally:
            http_response.close()

        result: ApiResponse[Any] = ApiResponse(
            status_code=http_response.status_code,
            reason=http_response.reason or "",
            headers=http_response.headers,
            body=content,
            http_response=http_response,
        )
        if "json" not in http_response.headers.get("Content-Type", ""):
            return result

        code = http_response.status_code
        if code in data_parsers:
            result.data = data_parsers[code](json.loads(content))
        elif code in set(error_codes):
            result.error = _error(json.loads(content))
        return result

    def list_hosts(self, status: HostStatus | str | None = None) -> ApiResponse[list[Host]]:
        """List registered hosts, optionally filtered by status."""
        query = None if status is None else {"status": _status_text(status)}
        return self._call(
            "GET", _HOSTS_PATH, query=query,
            data_parsers={200: _host_list}, error_codes=(500,),
        )

    def create_host(self, body: HostCreateRequest | Mapping[str, Any]) -> ApiResponse[Host]:
        """Register a new host."""
        return self._call(
            "POST", _HOSTS_PATH, body=body,
            data_parsers={201: _host}, error_codes=(400, 500),
        )

    def get_host(self, host_id: int) -> ApiResponse[Host]:
        """Fetch one host by id."""
        return self._call(
            "GET", self._host_path(host_id),
            data_parsers={200: _host}, error_codes=(404, 500),
        )

    def update_host(
        self, host_id: int, body: HostUpdateRequest | Mapping[str, Any]
    ) -> ApiResponse[Host]:
        """Change a host's fields."""
        return self._call(
            "PUT", self._host_path(host_id), body=body,
            data_parsers={200: _host}, error_codes=(400, 404, 500),
        )

    def delete_host(self, host_id: int) -> ApiResponse[None]:
        """Deregister a host."""
        return self._call(
            "DELETE", self._host_path(host_id),
            data_parsers={}, error_codes=(404, 500),
        )

    def heartbeat(
        self, host_id: int, body: HostHeartbeatRequest | Mapping[str, Any]
    ) -> ApiResponse[Host]:
        """Report that a host is alive."""
        return self._call(
            "POST", self._host_path(host_id) + "/heartbeat", body=body,
            data_parsers={200: _host}, error_codes=(404, 500),
        )

    def health(self) -> ApiResponse[HealthStatus]:
        """Query the server's health endpoint."""
        return self._call("GET", _HEALTH_PATH, data_parsers={200: _health})

    @staticmethod
    def _host_path(host_id: int) -> str:
        return f"{_HOSTS_PATH}/{quote(str(host_id), safe='')}"