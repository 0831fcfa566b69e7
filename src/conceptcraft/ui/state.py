"""State management utilities for the Conceptcraft wizard UI.

The API client and the gallery store are shared by every session in the
process; the :class:`WizardSession` itself is per user and lives in
``gr.State``.  Handlers call :func:`build_controller` to pair the two.
"""

import logging

from conceptcraft.core.config import config

from .api_client import ApiClient
from .gallery_store import GalleryStore, JsonFileStorage
from .models import WizardSession
from .wizard import WizardController

logger = logging.getLogger(__name__)

_api_client: ApiClient | None = None
_gallery_store: GalleryStore | None = None


def get_api_client() -> ApiClient:
    """Return the process-wide API client, creating it on first use."""
    global _api_client
    if _api_client is None:
        base_url = config.resolved_api_base_url
        logger.info(f"Initializing ApiClient for {base_url}")
        _api_client = ApiClient(base_url)
    return _api_client


def get_gallery_store() -> GalleryStore:
    """Return the process-wide gallery store, creating it on first use."""
    global _gallery_store
    if _gallery_store is None:
        logger.info(f"Initializing GalleryStore in {config.gallery_dir}")
        _gallery_store = GalleryStore(JsonFileStorage(config.gallery_dir))
    return _gallery_store


def initialize_session(session: WizardSession | None = None) -> WizardSession:
    """Return *session*, or a fresh one when ``None``."""
    if session is None:
        logger.info("Creating new WizardSession")
        session = WizardSession()
    return session


def build_controller(session: WizardSession | None) -> WizardController:
    """Wrap *session* in a controller bound to the shared client and gallery."""
    return WizardController(
        api=get_api_client(),
        gallery=get_gallery_store(),
        session=initialize_session(session),
        results_delay=config.results_delay,
    )


def reset_shared_state() -> None:
    """Close and forget the shared API client and gallery store."""
    global _api_client, _gallery_store
    if _api_client is not None:
        _api_client.close()
    _api_client = None
    _gallery_store = None
