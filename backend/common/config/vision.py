"""Vision (actor detection) service configuration."""
from __future__ import annotations

import os

VISION_API_URL = os.getenv("VISION_API_URL", "http://localhost:3000/api/detect-actors").strip()
VISION_API_KEY = (os.getenv("VISION_API_KEY") or os.getenv("ANTHROPIC_API_KEY") or "").strip()
VISION_REQUEST_TIMEOUT_SEC = float(os.getenv("VISION_REQUEST_TIMEOUT_SEC", "120"))
VISION_MAX_RETRIES = int(os.getenv("VISION_MAX_RETRIES", "3"))
VISION_RETRY_BACKOFF_SEC = float(os.getenv("VISION_RETRY_BACKOFF_SEC", "0.5"))
