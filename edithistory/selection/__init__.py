"""
Selection Layer

RESPONSIBILITY: Prepare "new content since T" for a worklist of documents
ALLOWED INPUTS: Document ids, selection settings, a DocumentStore
OUTPUTS: WorklistReport (content per document, errors, needs-recompute)

WHAT THIS LAYER MUST NOT DO:
============================
- Reconstruct history itself (delegates to temporal.resolver)
- Hold implicit global state (the cache is an explicit collaborator)
- Build generation requests or count tokens
"""

from .cache import CacheKey, CacheStats, ChangeSetCache
from .settings import MODE_CHANGES, MODE_FULL, SelectionSettings
from .threshold import FILTER_ANY, FILTER_CUSTOM, FILTER_LAST_GENERATION, ThresholdPolicy
from .worklist import DocumentOutcome, WorklistProcessor, WorklistReport

__all__ = [
    'CacheKey',
    'CacheStats',
    'ChangeSetCache',
    'DocumentOutcome',
    'FILTER_ANY',
    'FILTER_CUSTOM',
    'FILTER_LAST_GENERATION',
    'MODE_CHANGES',
    'MODE_FULL',
    'SelectionSettings',
    'ThresholdPolicy',
    'WorklistProcessor',
    'WorklistReport',
]
