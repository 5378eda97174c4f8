"""Authenticated request construction.

A RequestBuilder binds one HTTP client to one base URL, an API key, and a
fixed header set. The two upload channels each get their own builder since
they talk to different hosts with different headers.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field

from gitmeta.core.result import Result

from .http import HttpClient, HttpError, HttpResponse
from .multipart import MultipartForm

__all__ = ["API_KEY_HEADER", "RequestBuilder"]

API_KEY_HEADER = "DD-API-KEY"


def _no_headers() -> dict[str, str]:
    return {}


@dataclass(frozen=True, slots=True)
class RequestBuilder:
    """Sends requests relative to `base_url`.

    Attributes:
        client: Transport used for every request
        base_url: Scheme and host, e.g. "https://api.datadoghq.com"
        api_key: Sent as the DD-API-KEY header
        headers: Extra headers added to every request
        override_path: When set, every request goes to this path
    """

    client: HttpClient
    base_url: str
    api_key: str
    headers: Mapping[str, str] = field(default_factory=_no_headers)
    override_path: str | None = None

    def url(self, path: str = "") -> str:
        target = self.override_path if self.override_path is not None else path
        return f"{self.base_url.rstrip('/')}/{target.lstrip('/')}"

    def _headers(self, content_type: str | None = None) -> dict[str, str]:
        headers = {API_KEY_HEADER: self.api_key, **self.headers}
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    def get(self, path: str = "") -> Result[HttpResponse, HttpError]:
        return self.client.get(self.url(path), self._headers())

    def post_json(self, path: str, payload: object) -> Result[HttpResponse, HttpError]:
        body = json.dumps(payload).encode("utf-8")
        return self.client.post(self.url(path), body, self._headers("application/json"))

    def post_form(self, path: str, form: MultipartForm) -> Result[HttpResponse, HttpError]:
        return self.client.post(self.url(path), form.encode(), self._headers(form.content_type))
