"""Upload bounded context.

- retry: bounded retry executor with injected listeners
- srcmap: tracked-files upload channel
- gitdb: GitDB sync channel
- orchestrator: runs both channels and decides the exit code
- render: user-facing messages
"""

from __future__ import annotations
