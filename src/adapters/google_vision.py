"""Google Cloud Vision web detection adapter.

Implements the core WebDetectionPort using the Vision REST API.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import httpx

LOGGER = logging.getLogger(__name__)

VISION_ENDPOINT = "https://vision.googleapis.com/v1/images:annotate"


class GoogleVisionWebDetection:
    """Thin Vision API wrapper that satisfies the WebDetectionPort contract."""

    def __init__(self, client: httpx.AsyncClient, api_key: str, max_results: int = 20) -> None:
        self._client = client
        self._api_key = api_key
        self._max_results = max_results

    def _body(self, image_url: str) -> dict:
        return {
            "requests": [
                {
                    "image": {"source": {"imageUri": image_url}},
                    "features": [{"type": "WEB_DETECTION", "maxResults": self._max_results}],
                }
            ]
        }

    async def fetch_web_detection(self, image_url: str) -> Optional[Mapping[str, Any]]:
        """Return the ``webDetection`` block for one image, or None on failure."""

        try:
            response = await self._client.post(
                VISION_ENDPOINT,
                params={"key": self._api_key},
                json=self._body(image_url),
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            LOGGER.error("Web detection request failed: %s", exc.__class__.__name__)
            return None
        except ValueError:
            LOGGER.error("Web detection returned malformed JSON")
            return None

        try:
            first = data["responses"][0]
        except (KeyError, IndexError, TypeError):
            LOGGER.error("Web detection response has no results")
            return None
        if "error" in first:
            LOGGER.error("Web detection error: %s", first["error"].get("message", first["error"]))
            return None
        # An image with no hits at all comes back without a webDetection block.
        return first.get("webDetection") or {}
