"""Unit tests for wizard UI state management."""

import pytest
from unittest.mock import Mock, patch

from conceptcraft.ui import state as ui_state
from conceptcraft.ui.models import WizardSession, WizardStep
from conceptcraft.ui.state import build_controller, initialize_session, reset_shared_state


@pytest.fixture(autouse=True)
def clean_shared_state():
    reset_shared_state()
    yield
    reset_shared_state()


class TestInitializeSession:
    def test_none_creates_new_session(self):
        session = initialize_session(None)

        assert isinstance(session, WizardSession)
        assert session.step == WizardStep.UPLOAD

    def test_existing_session_returned_as_is(self):
        session = WizardSession(step=WizardStep.GALLERY)

        assert initialize_session(session) is session


class TestSharedComponents:
    def test_api_client_uses_configured_base_url(self, test_config):
        with patch("conceptcraft.ui.state.config", test_config), \
             patch("conceptcraft.ui.state.ApiClient") as MockApiClient:
            first = ui_state.get_api_client()
            second = ui_state.get_api_client()

        assert first is second
        MockApiClient.assert_called_once_with(test_config.resolved_api_base_url)

    def test_gallery_store_lives_in_gallery_dir(self, test_config):
        with patch("conceptcraft.ui.state.config", test_config):
            gallery = ui_state.get_gallery_store()

        assert gallery is ui_state.get_gallery_store()
        assert gallery.storage.directory == test_config.gallery_dir

    def test_reset_closes_api_client(self, test_config):
        with patch("conceptcraft.ui.state.config", test_config), \
             patch("conceptcraft.ui.state.ApiClient") as MockApiClient:
            client = ui_state.get_api_client()
            reset_shared_state()

        client.close.assert_called_once()
        assert MockApiClient.call_count == 1


class TestBuildController:
    def test_binds_session_and_shared_components(self, test_config):
        session = WizardSession()
        api = Mock()

        with patch("conceptcraft.ui.state.config", test_config), \
             patch("conceptcraft.ui.state.get_api_client", return_value=api):
            controller = build_controller(session)

        assert controller.session is session
        assert controller.api is api
        assert controller.results_delay == test_config.results_delay

    def test_none_session_gets_fresh_session(self, test_config):
        with patch("conceptcraft.ui.state.config", test_config), \
             patch("conceptcraft.ui.state.get_api_client", return_value=Mock()):
            controller = build_controller(None)

        assert controller.session.step == WizardStep.UPLOAD
