"""
Contexto de dependencias del motor.

Agrupa los handles vivos a los colaboradores externos. Se crea una vez
al arrancar el proceso (conexiones reutilizables) y se pasa a cada
componente; los tests arman uno con fakes.
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from brujula.analysis import (
    GeminiEmbedder,
    IntentExtractor,
    ResponseExplainer,
    get_llm_provider,
)
from brujula.config import Settings, get_settings
from brujula.stores import (
    ChromaVectorIndex,
    Embedder,
    Neo4jPropertyStore,
    PropertyStore,
    VectorIndex,
)

logger = structlog.get_logger()


@dataclass
class SearchContext:
    """Handles a store estructurado, índice vectorial y servicios de IA."""

    settings: Settings
    property_store: PropertyStore
    vector_index: VectorIndex
    embedder: Embedder
    intent_extractor: Optional[IntentExtractor] = None
    explainer: Optional[ResponseExplainer] = None

    async def aclose(self) -> None:
        """Cierra las conexiones de los stores."""
        await self.property_store.close()
        await self.vector_index.close()
        logger.info("Conexiones cerradas")


async def create_context(
    settings: Optional[Settings] = None,
    with_llm: bool = True,
) -> SearchContext:
    """
    Abre las conexiones a Neo4j y ChromaDB e instancia los servicios de IA.

    Args:
        settings: Configuración (default: get_settings())
        with_llm: Instanciar extractor de intención y explicador

    Returns:
        SearchContext listo para usar

    Raises:
        ValueError: Si falta la API key de embeddings
        Exception: Si algún store no responde al conectar
    """
    settings = settings or get_settings()
    embedder = GeminiEmbedder(settings=settings)

    property_store = await Neo4jPropertyStore.connect(settings)
    try:
        vector_index = await ChromaVectorIndex.connect(settings)
    except Exception:
        await property_store.close()
        raise

    context = SearchContext(
        settings=settings,
        property_store=property_store,
        vector_index=vector_index,
        embedder=embedder,
    )

    if with_llm:
        try:
            provider = get_llm_provider(settings)
        except ValueError as e:
            logger.warning("LLM no configurado, sin extractor ni explicación", error=str(e))
        else:
            context.intent_extractor = IntentExtractor(provider=provider, settings=settings)
            context.explainer = ResponseExplainer(provider=provider, settings=settings)

    logger.info("Contexto de búsqueda listo")
    return context
