"""Error type for the upload channels."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias

__all__ = ["UploadError", "UploadErrorKind"]

UploadErrorKind: TypeAlias = Literal["configuration", "retrieval", "transport", "flush"]


@dataclass(frozen=True, slots=True)
class UploadError:
    """Canonical error for every upload step.

    Attributes:
        kind: configuration (bad/missing API key), retrieval (git metadata
            unavailable), transport (send failed), flush (metrics not sent)
        message: Human-readable description
        hint: Optional remediation shown under the message
        retryable: False when another attempt cannot succeed
    """

    kind: UploadErrorKind
    message: str
    hint: str | None = None
    retryable: bool = True

    def __str__(self) -> str:
        return self.message

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message

    @classmethod
    def configuration(cls, message: str, hint: str | None = None) -> UploadError:
        return cls("configuration", message, hint=hint, retryable=False)

    @classmethod
    def retrieval(cls, message: str) -> UploadError:
        return cls("retrieval", message, retryable=False)

    @classmethod
    def transport(cls, message: str, *, retryable: bool = True) -> UploadError:
        return cls("transport", message, retryable=retryable)

    @classmethod
    def flush(cls, message: str) -> UploadError:
        return cls("flush", message)
