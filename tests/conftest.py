"""Shared pytest fixtures for Conceptcraft tests."""

import io
import json
import shutil
import tempfile
from pathlib import Path
from typing import Generator
from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from conceptcraft.api.main import app
from conceptcraft.core.config import ConceptcraftConfig
from conceptcraft.core.relay_client import RelayClient
from conceptcraft.ui.api_client import ApiClient
from conceptcraft.ui.gallery_store import GalleryStore, MemoryStorage
from conceptcraft.ui.models import WizardSession
from conceptcraft.ui.wizard import WizardController


class StubUpstream:
    """Stand-in for the chat-completion provider.

    Answers every request with ``reply`` (or ``status_code`` and
    ``error_body`` when the status is not 200) and records request payloads.
    """

    def __init__(self, reply: str = "STUB_CONCEPT"):
        self.reply = reply
        self.status_code = 200
        self.error_body = "upstream exploded"
        self.requests: list[dict] = []
        self.headers: list[httpx.Headers] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        self.headers.append(request.headers)
        if self.status_code != 200:
            return httpx.Response(self.status_code, text=self.error_body)
        return httpx.Response(
            200,
            json={"choices": [{"message": {"role": "assistant", "content": self.reply}}]},
        )

    @property
    def last_messages(self) -> list[dict]:
        return self.requests[-1]["messages"]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> ConceptcraftConfig:
    """Create a test configuration with a temporary gallery directory."""
    return ConceptcraftConfig(
        openrouter_api_key="test-key",
        gallery_dir=temp_dir / "data",
        results_delay=0.0,
    )


@pytest.fixture
def upstream() -> StubUpstream:
    return StubUpstream()


@pytest.fixture
def relay_client(upstream: StubUpstream) -> RelayClient:
    """Relay client wired to the stub upstream."""
    return RelayClient(
        api_key="test-key",
        referer="https://example.test",
        title="Conceptcraft Tests",
        transport=httpx.MockTransport(upstream.handler),
    )


@pytest.fixture
def test_client(relay_client: RelayClient) -> Generator[TestClient, None, None]:
    """FastAPI TestClient whose lifespan installs the stubbed relay client."""
    with patch("conceptcraft.api.main.RelayClient") as MockRelayClient:
        MockRelayClient.from_config.return_value = relay_client
        with TestClient(app) as client:
            yield client


@pytest.fixture
def gallery() -> GalleryStore:
    return GalleryStore(MemoryStorage())


@pytest.fixture
def api_client(test_client: TestClient) -> ApiClient:
    """Wizard API client talking to the app in-process."""
    return ApiClient(client=test_client)


@pytest.fixture
def controller(api_client: ApiClient, gallery: GalleryStore) -> WizardController:
    """Wizard controller running end-to-end against the stubbed app."""
    return WizardController(api=api_client, gallery=gallery, session=WizardSession())


def make_image_bytes(image_format: str = "PNG", size: tuple[int, int] = (8, 8)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, (200, 10, 10)).save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image_bytes("JPEG")


@pytest.fixture
def image_bytes():
    """Factory producing a tiny encoded image in the requested format."""
    return make_image_bytes
