"""
Motor de búsqueda híbrida.

Combina filtros duros en el store estructurado con similitud semántica
y produce un único ranking por fusión multifactor.
"""

from brujula.search.intent import parse_intent
from brujula.search.semantic import SemanticRetriever
from brujula.search.structured import StructuredFilterEngine, apply_candidate_hint
from brujula.search.fusion import FusionWeights, fuse
from brujula.search.assembler import assemble
from brujula.search.engine import HybridSearchEngine

__all__ = [
    "parse_intent",
    "SemanticRetriever",
    "StructuredFilterEngine",
    "apply_candidate_hint",
    "FusionWeights",
    "fuse",
    "assemble",
    "HybridSearchEngine",
]
