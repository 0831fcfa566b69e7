"""Core functionality shared by the API and the wizard.

config
    Pydantic Settings configuration and the global ``config`` instance.
errors
    Exception hierarchy.
prompt_composer
    Message templates and composition for relay calls.
relay_client
    Async client for the upstream chat-completion provider.
"""

from .config import ConceptcraftConfig, config
from .errors import (
    ConceptcraftError,
    ConfigurationError,
    NetworkError,
    RelayError,
    UpstreamError,
    WizardError,
)
from .prompt_composer import UpstreamMessage
from .relay_client import RelayClient

__all__ = [
    "ConceptcraftConfig",
    "config",
    "ConceptcraftError",
    "ConfigurationError",
    "NetworkError",
    "RelayError",
    "UpstreamError",
    "WizardError",
    "UpstreamMessage",
    "RelayClient",
]
