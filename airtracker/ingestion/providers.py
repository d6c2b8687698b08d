"""
Provider registry.

Builds the ordered adapter list from configuration. Order matters: the
orchestrator commits the first provider that returns data.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence

from airtracker.config import config
from airtracker.exceptions import ConfigurationError
from airtracker.ingestion.aviationstack_client import AviationStackClient
from airtracker.ingestion.base import ProviderAdapter
from airtracker.ingestion.opensky_client import OpenSkyClient

logger = logging.getLogger(__name__)


def _build_aviationstack() -> Optional[ProviderAdapter]:
    if not config.aviationstack.is_configured:
        logger.warning('AviationStack API key not configured - fallback provider disabled')
        return None
    return AviationStackClient.from_config()


PROVIDER_FACTORIES: Dict[str, Callable[[], Optional[ProviderAdapter]]] = {
    'opensky': OpenSkyClient.from_config,
    'aviationstack': _build_aviationstack,
}


def build_adapters(names: Optional[Sequence[str]] = None) -> List[ProviderAdapter]:
    """
    Create adapters for the configured provider names, in order.

    Providers that need credentials and have none are skipped.

    Raises:
        ConfigurationError for an unknown provider name
    """
    names = config.ingestion.providers if names is None else names

    adapters = []
    for name in names:
        factory = PROVIDER_FACTORIES.get(name)
        if factory is None:
            raise ConfigurationError(
                f'Unknown provider {name!r}; expected one of {sorted(PROVIDER_FACTORIES)}'
            )
        adapter = factory()
        if adapter is not None:
            adapters.append(adapter)

    if not adapters:
        logger.warning('No aircraft providers configured; ingestion will never write data')
    else:
        logger.info(f'Provider order: {", ".join(a.name for a in adapters)}')

    return adapters
