"""
Single-row enrichment: discovery, extraction and merge.
"""

import logging

from .models import EntityDiscoveryClient, ExtractionClient, Row, RowOutcome, RowStatus
from ..errors import DiscoveryError, ExtractionError, ExtractionParseError


class RowEnricher:
    """Combines a discovery and an extraction client for one row at a time.

    Discovery failures keep the original row. Extraction failures count as
    zero extracted fields. Any other exception is left to the caller.
    """

    def __init__(self, discovery_client: EntityDiscoveryClient, extraction_client: ExtractionClient):
        self.discovery_client = discovery_client
        self.extraction_client = extraction_client
        self.logger = logging.getLogger(__name__)

    def enrich(self, row: Row, entity_name: str) -> RowOutcome:
        """Enrich a row for the given entity name."""
        if not entity_name or not entity_name.strip():
            return RowOutcome(row=row, status=RowStatus.SKIPPED, message="Skipped row with empty entity name")

        try:
            discovered = self.discovery_client.discover(entity_name)
        except DiscoveryError as e:
            return RowOutcome(row=row, status=RowStatus.FAILED, message=f"No content found for {entity_name}: {e}")

        if not discovered.content or not discovered.content.strip():
            return RowOutcome(
                row=row,
                status=RowStatus.FAILED,
                message=f"Empty content for {entity_name} from {discovered.source_url}",
                source_url=discovered.source_url,
            )

        try:
            fields = self.extraction_client.extract(discovered.content, entity_name)
        except ExtractionParseError as e:
            self.logger.warning(f"Could not parse extraction for {entity_name}: {e}")
            fields = {}
        except ExtractionError as e:
            self.logger.warning(f"Extraction failed for {entity_name}: {e}")
            fields = {}

        merged = dict(row)
        merged.update(fields)

        if fields:
            status = RowStatus.ENRICHED
            message = f"Extracted {len(fields)} fields for {entity_name} from {discovered.source_url}"
        else:
            status = RowStatus.EMPTY
            message = f"No contact fields found for {entity_name} at {discovered.source_url}"

        return RowOutcome(
            row=merged,
            status=status,
            message=message,
            fields=dict(fields),
            source_url=discovered.source_url,
        )

    def close(self):
        """Clean up resources."""
        try:
            self.discovery_client.close()
        finally:
            self.extraction_client.close()
