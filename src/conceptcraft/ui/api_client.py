"""HTTP client the wizard uses to reach the Conceptcraft API."""

import logging

import httpx

from conceptcraft.core.errors import NetworkError

logger = logging.getLogger(__name__)


class ApiClient:
    """Thin JSON client for the relay endpoints.

    Args:
        base_url: API origin, e.g. ``http://127.0.0.1:3000``.
        client: Optional pre-built ``httpx.Client``.  Tests pass a FastAPI
            ``TestClient`` here to talk to the app in-process.
    """

    def __init__(self, base_url: str = "", client: httpx.Client | None = None):
        self.client = client or httpx.Client(base_url=base_url, timeout=None)

    def _post(self, endpoint: str, data: dict) -> dict:
        """POST *data* to *endpoint* and return the decoded JSON body.

        Raises:
            NetworkError: On transport failure or any non-2xx status.  The
                server's ``error`` message is used when available.
        """
        try:
            response = self.client.post(endpoint, json=data)
            if not response.is_success:
                try:
                    message = response.json().get("error")
                except (ValueError, AttributeError):
                    message = None
                raise NetworkError(f"Network error: {message or f'API error: {response.status_code}'}")
            return response.json()
        except NetworkError:
            logger.error(f"API call to {endpoint} failed", exc_info=True)
            raise
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"API call to {endpoint} failed: {e}")
            raise NetworkError(f"Network error: {e}") from e

    def generate_concept(self, style: str, topic: str, aspect_ratio: str) -> dict:
        return self._post(
            "/api/generate-concept",
            {"style": style, "topic": topic, "aspectRatio": aspect_ratio},
        )

    def remove_background(self, image_data: str) -> dict:
        return self._post("/api/remove-background", {"imageData": image_data})

    def generate_image(self, prompt: str, style: str, aspect_ratio: str) -> dict:
        return self._post(
            "/api/generate-image",
            {"prompt": prompt, "style": style, "aspectRatio": aspect_ratio},
        )

    def close(self) -> None:
        self.client.close()
