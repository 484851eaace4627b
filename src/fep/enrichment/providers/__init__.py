"""Enrichment providers."""

from fep.enrichment.providers.ai import AiEnrichmentProvider
from fep.enrichment.providers.rules import RulesEnrichmentProvider

__all__ = ["AiEnrichmentProvider", "RulesEnrichmentProvider"]
