"""Officials library: representative directory sourcing.

Public API:
    - OfficialRecord: Normalized dataclass for office holders from any provider
    - BaseOfficialsProvider: Abstract provider interface
    - OfficialsProviderError: Provider-level error
    - OfficialsConfigError: Provider used without an API key
    - get_provider: Provider factory/registry
"""

from typing import Any

from loguru import logger

from outreach_api.lib.officials.base import (
    BaseOfficialsProvider,
    OfficialRecord,
    OfficialsConfigError,
    OfficialsProviderError,
)
from outreach_api.lib.officials.congress_gov import CongressGovProvider
from outreach_api.lib.officials.google_civic import GoogleCivicProvider
from outreach_api.lib.officials.open_states import OpenStatesProvider

_PROVIDERS: dict[str, type[BaseOfficialsProvider]] = {}


def get_provider(name: str, **kwargs: Any) -> BaseOfficialsProvider:
    """Get a directory-provider instance by name.

    Args:
        name: Provider name (e.g., "open_states", "congress_gov").
        **kwargs: Additional arguments forwarded to the provider constructor.

    Returns:
        An instance of the requested provider.

    Raises:
        ValueError: If the provider is not registered.
        OfficialsConfigError: If ``api_key`` is missing or empty.
    """
    cls = _PROVIDERS.get(name)
    if cls is None:
        msg = f"Unknown officials provider: {name!r}. Available: {list(_PROVIDERS.keys())}"
        raise ValueError(msg)
    if not kwargs.get("api_key"):
        msg = f"API key for officials provider {name!r} is not configured"
        raise OfficialsConfigError(msg)
    return cls(**kwargs)


def register_provider(name: str, cls: type[BaseOfficialsProvider]) -> None:
    """Register a provider class in the global registry.

    Args:
        name: Short name for the provider.
        cls: Provider class (must subclass BaseOfficialsProvider).
    """
    if name in _PROVIDERS:
        logger.warning(f"Overwriting existing officials provider {name!r}")
    _PROVIDERS[name] = cls


register_provider("congress_gov", CongressGovProvider)
register_provider("open_states", OpenStatesProvider)
register_provider("google_civic", GoogleCivicProvider)

__all__ = [
    "BaseOfficialsProvider",
    "CongressGovProvider",
    "GoogleCivicProvider",
    "OfficialRecord",
    "OfficialsConfigError",
    "OfficialsProviderError",
    "OpenStatesProvider",
    "get_provider",
    "register_provider",
]
