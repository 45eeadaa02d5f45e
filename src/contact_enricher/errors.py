"""
Exception hierarchy for Contact Enricher.
Per-row errors are recovered by the pipeline; only configuration and
state-machine errors reach the caller.
"""

from typing import Optional


class EnrichmentError(Exception):
    """Base class for all enrichment errors."""


class ConfigurationError(EnrichmentError):
    """Missing credentials or invalid configuration."""


class DiscoveryError(EnrichmentError):
    """Web discovery found no usable content for an entity."""

    def __init__(self, message: str, entity_name: Optional[str] = None):
        super().__init__(message)
        self.entity_name = entity_name


class ExtractionError(EnrichmentError):
    """The extraction service call failed."""


class ExtractionParseError(ExtractionError):
    """The extraction response held no parseable JSON object."""


class UnexpectedRowError(EnrichmentError):
    """Any other failure while processing a single row."""

    def __init__(self, row_index: int, entity_name: str, cause: Exception):
        super().__init__(f"Row {row_index + 1} ({entity_name}): {cause}")
        self.row_index = row_index
        self.entity_name = entity_name
        self.cause = cause


class InvalidTransitionError(EnrichmentError):
    """A control operation was called from a state that does not allow it."""


class PipelineError(EnrichmentError):
    """The pipeline loop itself failed outside of per-row handling."""
