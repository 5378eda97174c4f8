"""multipart/form-data encoding for intake uploads."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

__all__ = ["FormPart", "MultipartForm"]


@dataclass(frozen=True, slots=True)
class FormPart:
    name: str
    content: bytes
    filename: str | None = None
    content_type: str | None = None


def _empty_parts() -> list[FormPart]:
    return []


@dataclass
class MultipartForm:
    """Ordered multipart body.

    Usage:
        form = MultipartForm()
        form.add_field("git_commit_sha", sha)
        form.add_file("repository", payload, filename="repository", content_type="application/json")
        body = form.encode()
        headers = {"Content-Type": form.content_type}
    """

    boundary: str = field(default_factory=lambda: f"gitmeta-{uuid.uuid4().hex}")
    parts: list[FormPart] = field(default_factory=_empty_parts)

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    def add_field(self, name: str, value: str, *, content_type: str | None = None) -> None:
        self.parts.append(FormPart(name, value.encode("utf-8"), content_type=content_type))

    def add_file(
        self,
        name: str,
        content: bytes,
        *,
        filename: str,
        content_type: str = "application/octet-stream",
    ) -> None:
        self.parts.append(FormPart(name, content, filename=filename, content_type=content_type))

    def encode(self) -> bytes:
        chunks: list[bytes] = []
        for part in self.parts:
            disposition = f'form-data; name="{part.name}"'
            if part.filename is not None:
                disposition += f'; filename="{part.filename}"'
            head = f"--{self.boundary}\r\nContent-Disposition: {disposition}\r\n"
            if part.content_type:
                head += f"Content-Type: {part.content_type}\r\n"
            chunks.append(head.encode("utf-8") + b"\r\n" + part.content + b"\r\n")
        chunks.append(f"--{self.boundary}--\r\n".encode("utf-8"))
        return b"".join(chunks)
