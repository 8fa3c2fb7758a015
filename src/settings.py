"""Static configuration for repostscope.

All user-editable settings (search, attribution, provenance, logging) live
in a single JSON file for quick edits without touching Python. Secrets stay
in the environment.
"""

import json
import os

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# config.json sits next to the project by default; REPOSTSCOPE_CONFIG points
# elsewhere for installed copies.
CONFIG_PATH = os.getenv("REPOSTSCOPE_CONFIG") or os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Reverse image search: how many pages the provider may return per image.
_vision = _CONFIG.get("vision", {})
VISION_MAX_RESULTS = int(_vision.get("max_results", 20))

# Shared HTTP client settings used by every adapter.
_http = _CONFIG.get("http", {})
USER_AGENT = _http.get("user_agent") or None
HTTP_TIMEOUT_SECONDS = float(_http.get("timeout_seconds", 30))

# Per-image searches run concurrently up to this many at a time.
_scan = _CONFIG.get("scan", {})
MAX_CONCURRENCY = int(_scan.get("max_concurrency", 5))

# Author resolution is rate limited by Reddit; the delay keeps us under it.
_attribution = _CONFIG.get("attribution", {})
RESOLVE_DELAY_SECONDS = float(_attribution.get("resolve_delay_seconds", 0.65))
DELETED_AUTHOR = _attribution.get("deleted_author", "[deleted]")

# Social hosts whose pages are fetched to find the author's name.
_provenance = _CONFIG.get("provenance", {})
SOCIAL_DOMAINS = tuple(
    _provenance.get("social_domains", ["facebook.com", "instagram.com", "pinterest.com"])
)
FETCH_TIMEOUT_SECONDS = float(_provenance.get("fetch_timeout_seconds", 10))
SOCIAL_MATCH_THRESHOLD = int(_provenance.get("match_threshold", 90))

# Scores at or above this are reported as probable matches.
_verdict = _CONFIG.get("verdict", {})
MIN_CONFIDENCE = int(_verdict.get("min_confidence", 50))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
