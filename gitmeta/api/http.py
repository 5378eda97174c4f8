"""HTTP client abstraction for the intake and API endpoints.

This module provides:
- HttpClient: Protocol for HTTP operations (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Scripted implementation for testing
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from gitmeta import __version__
from gitmeta.core.result import Err, Ok, Result

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpRequest",
    "HttpResponse",
    "MockHttpClient",
    "RealHttpClient",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@dataclass(frozen=True, slots=True)
class HttpResponse:
    status: int
    body: bytes = b""

    def json(self) -> object:
        """Decode the body as JSON. Raises ValueError on malformed content."""
        if not self.body:
            return None
        return json.loads(self.body.decode("utf-8"))


@dataclass(frozen=True, slots=True)
class HttpRequest:
    """A request as seen by MockHttpClient."""

    method: str
    url: str
    headers: Mapping[str, str]
    body: bytes | None = None


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations.

    Non-2xx responses are returned as Err(HttpError) with the status set.
    """

    def get(self, url: str, headers: Mapping[str, str]) -> Result[HttpResponse, HttpError]: ...

    def post(
        self, url: str, body: bytes, headers: Mapping[str, str]
    ) -> Result[HttpResponse, HttpError]: ...


class RealHttpClient:
    """HTTP client using urllib with system certificates."""

    def __init__(self, timeout: float = 30.0, user_agent: str = f"gitmeta/{__version__}") -> None:
        """Initialize HTTP client.

        Args:
            timeout: Per-request timeout in seconds
            user_agent: User-Agent header value
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def get(self, url: str, headers: Mapping[str, str]) -> Result[HttpResponse, HttpError]:
        return self._request("GET", url, None, headers)

    def post(
        self, url: str, body: bytes, headers: Mapping[str, str]
    ) -> Result[HttpResponse, HttpError]:
        return self._request("POST", url, body, headers)

    def _request(
        self,
        method: str,
        url: str,
        body: bytes | None,
        headers: Mapping[str, str],
    ) -> Result[HttpResponse, HttpError]:
        try:
            req = urllib.request.Request(
                url,
                data=body,
                method=method,
                headers={"User-Agent": self.user_agent, **headers},
            )
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(HttpResponse(status=response.status, body=response.read()))
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))


def _empty_requests() -> list[HttpRequest]:
    return []


@dataclass
class MockHttpClient:
    """Mock HTTP client for testing.

    Responses are queued per (method, url). Each call pops the next one; the
    last queued response is repeated once the queue is down to one entry.
    Unknown URLs answer 404.

    Usage:
        client = MockHttpClient()
        client.queue("POST", url, HttpError(url, 500, "boom"), HttpResponse(202))
    """

    calls: list[HttpRequest] = field(default_factory=_empty_requests)
    _responses: dict[tuple[str, str], list[HttpResponse | HttpError]] = field(
        default_factory=dict
    )

    def queue(self, method: str, url: str, *responses: HttpResponse | HttpError) -> None:
        self._responses.setdefault((method, url), []).extend(responses)

    def get(self, url: str, headers: Mapping[str, str]) -> Result[HttpResponse, HttpError]:
        return self._answer(HttpRequest("GET", url, dict(headers)))

    def post(
        self, url: str, body: bytes, headers: Mapping[str, str]
    ) -> Result[HttpResponse, HttpError]:
        return self._answer(HttpRequest("POST", url, dict(headers), body))

    def requests_to(self, url: str) -> list[HttpRequest]:
        return [c for c in self.calls if c.url == url]

    def _answer(self, request: HttpRequest) -> Result[HttpResponse, HttpError]:
        self.calls.append(request)
        queued = self._responses.get((request.method, request.url))
        if not queued:
            return Err(HttpError(url=request.url, status=404, message="Not found (mock)"))

        response = queued.pop(0) if len(queued) > 1 else queued[0]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)
