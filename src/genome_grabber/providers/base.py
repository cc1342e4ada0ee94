"""Abstract base class for genome providers."""

from abc import ABC, abstractmethod

from genome_grabber.models import AssemblyLevel, FetchResult


class BaseProvider(ABC):
    def __init__(self, source: str):
        self._source = source

    @property
    def source(self) -> str:
        """Assembly source this provider queries (e.g., 'refseq')."""
        return self._source

    @abstractmethod
    def fetch(self, organism: str, assembly_level: AssemblyLevel) -> FetchResult:
        """Return a genome archive for the organism. Must not raise."""
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(source={self._source!r})"
