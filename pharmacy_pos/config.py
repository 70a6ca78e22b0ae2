"""Runtime configuration defaults for the backend API, search and logging."""

from __future__ import annotations

import os

API_BASE_URL = os.environ.get("PHARMACY_API_URL", "http://localhost:8081/api").rstrip("/")
API_TOKEN = os.environ.get("PHARMACY_API_TOKEN", "")
REQUEST_TIMEOUT_SECONDS = 10

# Quiet window before a typed query is dispatched.
SEARCH_DEBOUNCE_SECONDS = 0.3
SEARCH_MIN_QUERY_LENGTH = 2

DEBUG_LOG_PATH = os.environ.get("PHARMACY_POS_DEBUG_LOG", "/tmp/pharmacy-pos-debug.log")

CURRENCY_SYMBOL = "R$"
