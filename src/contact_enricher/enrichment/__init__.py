"""
Enrichment module for Contact Enricher.
Handles entity detection, per-row enrichment, the pipeline state machine and result statistics.
"""

from .aggregator import EnrichmentStatistics, FieldStatistic, ResultAggregator
from .contact_extractor import ContactExtractor
from .fields import CONTACT_FIELDS, clean_fields, parse_extraction_response
from .models import DiscoveryResult, EntityDiscoveryClient, ExtractionClient, RowOutcome, RowStatus
from .pipeline import (
    CallbackObserver,
    EnrichmentPipeline,
    PipelineObserver,
    PipelineStatus,
    ProgressUpdate,
)
from .resolver import EntityColumnResolver
from .row_enricher import RowEnricher

__all__ = [
    'CONTACT_FIELDS',
    'CallbackObserver',
    'ContactExtractor',
    'DiscoveryResult',
    'EnrichmentPipeline',
    'EnrichmentStatistics',
    'EntityColumnResolver',
    'EntityDiscoveryClient',
    'ExtractionClient',
    'FieldStatistic',
    'PipelineObserver',
    'PipelineStatus',
    'ProgressUpdate',
    'ResultAggregator',
    'RowEnricher',
    'RowOutcome',
    'RowStatus',
    'clean_fields',
    'parse_extraction_response',
]
