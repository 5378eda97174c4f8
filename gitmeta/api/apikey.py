"""Lazy API key validation.

Senders only consult the validator after the intake answered 403, to tell an
invalid key (no point retrying) from a transient permission problem.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from gitmeta.core.result import Err, Ok, Result

from .http import HttpError
from .request import RequestBuilder

__all__ = ["VALIDATE_PATH", "ApiKeyValidator"]

VALIDATE_PATH = "api/v1/validate"


@dataclass
class ApiKeyValidator:
    """Checks the API key once against the validate endpoint and caches it."""

    requests: RequestBuilder
    _cached: bool | None = field(default=None, init=False)

    def is_valid(self) -> Result[bool, HttpError]:
        if self._cached is not None:
            return Ok(self._cached)

        result = self.requests.get(VALIDATE_PATH)
        match result:
            case Ok(_):
                self._cached = True
            case Err(e) if e.status in (401, 403):
                self._cached = False
            case Err(e):
                return Err(e)
        return Ok(self._cached)
