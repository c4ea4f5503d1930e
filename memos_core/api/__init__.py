"""HTTP API for memos-core: auth endpoints and the /api/v1 blueprint."""
