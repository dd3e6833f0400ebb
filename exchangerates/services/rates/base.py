from __future__ import annotations

"""Dataset source abstraction.

A source produces the raw ECB XML document; parsing and caching live
elsewhere so a cached copy and a fresh download go through the same parser.
"""
from abc import ABC, abstractmethod
from typing import Protocol

from .dataset import Dataset


class DatasetSource(ABC):
    name: str = "abstract"

    @abstractmethod
    def fetch(self) -> str:
        """Return the raw XML document."""
        raise NotImplementedError


class SupportsDataset(Protocol):
    def require(self) -> Dataset: ...
