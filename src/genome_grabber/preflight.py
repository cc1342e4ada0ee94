"""Check that every capability the run needs is present before any work starts."""

import importlib
import logging
import shutil
from typing import Dict, Iterable, List, Tuple

from genome_grabber.config import AcquisitionConfig
from genome_grabber.errors import MissingDependency

logger = logging.getLogger(__name__)

DATASETS_EXECUTABLE = "datasets"

# capability -> (kind, name)
CAPABILITIES: Dict[str, Tuple[str, str]] = {
    "fetch": ("module", "requests"),
    "retry": ("module", "tenacity"),
    "archive-extract": ("module", "zipfile"),
    "compress": ("module", "gzip"),
    "tabular-parse": ("module", "csv"),
    "datasets-cli": ("executable", DATASETS_EXECUTABLE),
}


def required_capabilities(config: AcquisitionConfig) -> List[str]:
    required = ["fetch", "retry", "archive-extract", "tabular-parse"]
    if config.compress:
        required.append("compress")
    if config.backend == "cli":
        required.append("datasets-cli")
    return required


def _is_available(kind: str, name: str) -> bool:
    """Modules must import, not merely be locatable; gzip is locatable without zlib."""
    if kind == "executable":
        return shutil.which(name) is not None
    try:
        importlib.import_module(name)
    except ImportError:
        return False
    return True


def verify(capabilities: Iterable[str]) -> None:
    """Raise MissingDependency listing every absent capability, not just the first."""
    logger.info("Checking dependencies...")
    missing = []
    for capability in capabilities:
        if capability not in CAPABILITIES:
            raise ValueError(f"Unknown capability: {capability}")
        kind, name = CAPABILITIES[capability]
        if not _is_available(kind, name):
            logger.error("Required %s '%s' not found (%s)", kind, name, capability)
            missing.append(f"{capability} ({name})")

    if missing:
        raise MissingDependency(missing)
    logger.info("All dependencies satisfied")
