"""
Modelos de datos del sistema.

- Intent: consulta validada
- Property / candidatos: salida de cada rama de búsqueda
- FusedResult / SearchResponse: ranking final
"""

from brujula.models.intent import Intent, RawIntent
from brujula.models.property import (
    Property,
    SemanticCandidate,
    StructuredMatch,
    VectorHit,
)
from brujula.models.query import PropertyQuery, presort_key
from brujula.models.result import (
    FusedResult,
    ResultItem,
    ScoreBreakdown,
    SearchResponse,
    SearchStatus,
)

__all__ = [
    # Intención
    "Intent",
    "RawIntent",
    # Ramas de búsqueda
    "Property",
    "SemanticCandidate",
    "StructuredMatch",
    "VectorHit",
    "PropertyQuery",
    "presort_key",
    # Ranking
    "FusedResult",
    "ResultItem",
    "ScoreBreakdown",
    "SearchResponse",
    "SearchStatus",
]
