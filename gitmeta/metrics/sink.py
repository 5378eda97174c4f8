"""Run counters and their single end-of-run flush.

Counters live in memory for the whole command. `flush()` is called once, at
the end, and ships them as a v1 series payload. A flush failure is returned
as an Err for the caller to report; it never affects the exit code.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from gitmeta.api.request import RequestBuilder
from gitmeta.core.result import Err, Ok, Result
from gitmeta.upload.errors import UploadError

__all__ = [
    "METRIC_PREFIX",
    "SERIES_PATH",
    "MetricsSink",
    "MockMetricsSink",
    "SeriesMetricsSink",
]

METRIC_PREFIX = "datadog.ci.report_commits."
SERIES_PATH = "api/v1/series"


class MetricsSink(Protocol):
    def increment(self, name: str, delta: int = 1) -> None: ...

    def flush(self) -> Result[None, UploadError]: ...


def _empty_counters() -> dict[str, int]:
    return {}


@dataclass
class SeriesMetricsSink:
    """Counts in memory and posts them to the series endpoint on flush."""

    requests: RequestBuilder
    tags: tuple[str, ...] = ()
    prefix: str = METRIC_PREFIX
    clock: Callable[[], float] = time.time
    counters: dict[str, int] = field(default_factory=_empty_counters)

    def increment(self, name: str, delta: int = 1) -> None:
        self.counters[name] = self.counters.get(name, 0) + delta

    def payload(self) -> dict[str, object]:
        now = int(self.clock())
        return {
            "series": [
                {
                    "metric": f"{self.prefix}{name}",
                    "points": [[now, value]],
                    "type": "count",
                    "tags": list(self.tags),
                }
                for name, value in sorted(self.counters.items())
            ]
        }

    def flush(self) -> Result[None, UploadError]:
        if not self.counters:
            return Ok(None)

        result = self.requests.post_json(SERIES_PATH, self.payload())
        if isinstance(result, Err):
            return Err(UploadError.flush(f"could not send metrics: {result.error}"))
        self.counters.clear()
        return Ok(None)


@dataclass
class MockMetricsSink:
    """Sink for tests. Counters persist across flushes so they can be asserted."""

    counters: dict[str, int] = field(default_factory=_empty_counters)
    flushes: int = 0
    fail_flush: UploadError | None = None

    def increment(self, name: str, delta: int = 1) -> None:
        self.counters[name] = self.counters.get(name, 0) + delta

    def flush(self) -> Result[None, UploadError]:
        self.flushes += 1
        if self.fail_flush is not None:
            return Err(self.fail_flush)
        return Ok(None)
