"""
Data types and collaborator interfaces shared by the enrichment core.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .fields import ExtractedFields

Row = Dict[str, str]
Table = List[Row]


def table_columns(table: Sequence[Row]) -> List[str]:
    """Column names of a table, taken from its first row."""
    if not table:
        return []
    return list(table[0].keys())


@dataclass
class DiscoveryResult:
    """Raw content found for an entity and where it came from."""
    content: str
    source_url: str


class EntityDiscoveryClient(ABC):
    """Finds raw web content describing an entity."""

    @abstractmethod
    def discover(self, entity_name: str) -> DiscoveryResult:
        """Return content for the entity or raise DiscoveryError."""
        pass

    def close(self):
        """Release network resources."""


class ExtractionClient(ABC):
    """Turns raw content into contact attributes."""

    @abstractmethod
    def extract(self, content: str, entity_name: str) -> ExtractedFields:
        """Return cleaned contact fields for the entity.

        May raise ExtractionError or ExtractionParseError.
        """
        pass

    def close(self):
        """Release network resources."""


class RowStatus:
    """Per-row outcome labels."""
    ENRICHED = 'enriched'
    EMPTY = 'empty'
    SKIPPED = 'skipped'
    FAILED = 'failed'


@dataclass
class RowOutcome:
    """Result of enriching one row."""
    row: Row
    status: str
    message: str
    fields: ExtractedFields = field(default_factory=dict)
    source_url: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return bool(self.fields)
