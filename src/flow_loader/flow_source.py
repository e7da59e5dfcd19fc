"""
Abstract flow source.

A flow source turns a file into Flow objects, in file order. The
analysis layer never reads files itself; it only consumes what a source
yields.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator

from models.flow import Flow


class IFlowSource(ABC):
    """Interface shared by all flow readers. Use as a context manager."""

    @abstractmethod
    def open(self):
        """Open and validate the underlying file."""

    @abstractmethod
    def __iter__(self) -> Iterator[Flow]:
        """Yield flows in file order."""

    @abstractmethod
    def close(self):
        """Release file resources."""

    @abstractmethod
    def get_session_info(self) -> Dict[str, Any]:
        """Return metadata about what was read so far."""

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
