"""
Adaptadores a los colaboradores de IA.

Proveedores LLM (Gemini/Groq) para extraer la intención y explicar
resultados, y generación de embeddings de la consulta.
"""

from brujula.analysis.embeddings import GeminiEmbedder
from brujula.analysis.intent_extractor import IntentExtractor
from brujula.analysis.response_explainer import ResponseExplainer, FALLBACK_EXPLANATION
from brujula.analysis.llm_providers import (
    get_llm_provider,
    BaseLLMProvider,
    GeminiProvider,
    GroqProvider,
    LLMResponse,
)

__all__ = [
    # Embeddings
    "GeminiEmbedder",
    # Colaboradores LLM
    "IntentExtractor",
    "ResponseExplainer",
    "FALLBACK_EXPLANATION",
    # Proveedores LLM
    "get_llm_provider",
    "BaseLLMProvider",
    "GeminiProvider",
    "GroqProvider",
    "LLMResponse",
]
