"""Base classes for data writers."""

from abc import ABC, abstractmethod
from typing import Any


class BaseWriter(ABC):
    """Abstract base class for all result writers."""

    @abstractmethod
    def write(self, data: Any) -> None:
        """Write data to the writer's destination."""
        pass
