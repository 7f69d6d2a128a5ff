# ---
# File: app/config.py
# Purpose: Environment-driven settings for the status page service
# ---

import os

# ---
# Backend collaborator
#   - STATUS_BACKEND_URL: base URL of the REST backend (e.g. http://localhost:3000).
#                         If empty/unset, an in-memory backend seeded with demo data is used.
#   - BACKEND_TIMEOUT_SECONDS: per-request timeout for backend calls
# ---
STATUS_BACKEND_URL = os.environ.get("STATUS_BACKEND_URL", "").strip()
BACKEND_TIMEOUT_SECONDS = float(os.environ.get("BACKEND_TIMEOUT_SECONDS", "10"))

# Author recorded on updates when the request does not name one
DEFAULT_AUTHOR = os.environ.get("DEFAULT_AUTHOR", "System Administrator")

# Comma-separated list of frontend origins
CORS_ALLOW_ORIGINS = [
    origin.strip() for origin in os.environ.get("CORS_ALLOW_ORIGINS", "").split(",") if origin.strip()
]

# ---
# Keep-alive (cold start prevention)
#   - KEEPALIVE_URL: full URL to ping (e.g. https://your-app.onrender.com/health); empty disables it
#   - KEEPALIVE_INTERVAL_SECONDS: time between pings (default 600)
#   - KEEPALIVE_TIMEOUT_SECONDS: HTTP timeout per ping (default 10)
# ---
KEEPALIVE_URL = os.environ.get("KEEPALIVE_URL", "").strip()
KEEPALIVE_INTERVAL_SECONDS = int(os.environ.get("KEEPALIVE_INTERVAL_SECONDS", "600"))
KEEPALIVE_TIMEOUT_SECONDS = int(os.environ.get("KEEPALIVE_TIMEOUT_SECONDS", "10"))

PORT = int(os.environ.get("PORT", "8000"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
