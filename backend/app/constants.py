DEFAULTS = {
    # Service name reported by FastAPI
    "APP_NAME": "mindgraph-backend",
    # Prefix prepended to every router
    "API_PREFIX": "",
    # Header carrying the caller id supplied by the identity provider
    "USER_ID_HEADER": "X-User-Id",
    # Enable/disable AI action rate limiting
    "RATE_LIMIT_ENABLED": True,
    # Per-action fixed-window budgets (window in milliseconds)
    "RATE_LIMITS": {
        "ai:extractTopic": {"max_requests": 30, "window_ms": 60000},
        "ai:searchTopic": {"max_requests": 20, "window_ms": 60000},
        "ai:generateMindMap": {"max_requests": 10, "window_ms": 60000},
        "ai:expandNode": {"max_requests": 15, "window_ms": 60000},
    },
    # Logging level for the mindgraph.* loggers
    "LOG_LEVEL": "INFO",
}
