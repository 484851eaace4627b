"""Enrichment package."""

from fep.enrichment.job import EnrichEventJob
from fep.enrichment.orchestrator import EnrichmentOrchestrator, Err, Ok
from fep.enrichment.providers import AiEnrichmentProvider, RulesEnrichmentProvider

__all__ = [
    "AiEnrichmentProvider",
    "EnrichEventJob",
    "EnrichmentOrchestrator",
    "Err",
    "Ok",
    "RulesEnrichmentProvider",
]
