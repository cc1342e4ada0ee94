"""Provider registry. New provider backends are added here."""

from typing import List, Optional

import requests

from genome_grabber.config import USER_AGENT, AcquisitionConfig
from genome_grabber.providers.base import BaseProvider
from genome_grabber.providers.datasets_api import DatasetsApiProvider
from genome_grabber.providers.datasets_cli import DatasetsCliProvider

PROVIDER_CLASSES = {
    "api": DatasetsApiProvider,
    "cli": DatasetsCliProvider,
}


def build_providers(
    config: AcquisitionConfig, session: Optional[requests.Session] = None
) -> List[BaseProvider]:
    """One provider per configured source, in fallback order."""
    cls = PROVIDER_CLASSES[config.backend]
    if cls is DatasetsApiProvider:
        if session is None:
            session = requests.Session()
            session.headers.update({"User-Agent": USER_AGENT})
        return [
            DatasetsApiProvider(
                source, session, timeout=config.timeout, retries=config.retries
            )
            for source in config.sources
        ]
    return [
        DatasetsCliProvider(source, timeout=config.timeout, retries=config.retries)
        for source in config.sources
    ]

__all__ = [
    "BaseProvider",
    "DatasetsApiProvider",
    "DatasetsCliProvider",
    "PROVIDER_CLASSES",
    "build_providers",
]
