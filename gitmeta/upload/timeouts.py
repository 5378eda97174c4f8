from __future__ import annotations

# Tracked-files upload retry policy
SRCMAP_MAX_ATTEMPTS = 5
SRCMAP_RETRY_DELAY_SECONDS = 1.0

# Per-request HTTP timeout
HTTP_TIMEOUT_SECONDS = 30.0

# GitDB sync window
GITDB_COMMIT_WINDOW = "1 month ago"
GITDB_MAX_COMMITS = 1000
