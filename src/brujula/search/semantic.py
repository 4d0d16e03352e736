"""
Recuperador semántico.

Embebe la parte subjetiva de la intención y consulta el índice
vectorial SIN filtros estructurados: el recall semántico no se recorta
acá, los predicados duros se aplican después en el store estructurado.
"""

import asyncio
from typing import Optional

import structlog

from brujula.context import SearchContext
from brujula.exceptions import RetrievalUnavailable
from brujula.models import SemanticCandidate, VectorHit

logger = structlog.get_logger()


def distance_to_similarity(distance: float) -> float:
    """similarity = (1 - distancia coseno) * 100, acotada a [0, 100]."""
    return max(0.0, min(100.0, (1.0 - distance) * 100.0))


def to_candidates(hits: list[VectorHit], limit: int) -> list[SemanticCandidate]:
    """
    Convierte hits del índice en candidatos ordenados por similitud desc.

    Si un ID aparece más de una vez se conserva su mejor similitud.
    """
    best: dict[str, float] = {}
    for hit in hits:
        similarity = distance_to_similarity(hit.distance)
        if hit.id not in best or similarity > best[hit.id]:
            best[hit.id] = similarity

    # sorted es estable: a igual similitud se respeta el orden del índice
    ordered = sorted(best.items(), key=lambda item: item[1], reverse=True)
    return [
        SemanticCandidate(property_id=property_id, similarity=similarity)
        for property_id, similarity in ordered[: max(limit, 0)]
    ]


class SemanticRetriever:
    """Rama semántica del pipeline."""

    def __init__(self, context: SearchContext):
        self.context = context
        self.settings = context.settings

    async def retrieve_or_raise(
        self, query_text: str, limit: Optional[int] = None
    ) -> list[SemanticCandidate]:
        """
        Igual que retrieve() pero propaga las fallas de dependencias.

        Raises:
            RetrievalUnavailable: Si el embedding o el índice fallan o exceden el timeout
        """
        limit = limit if limit is not None else self.settings.semantic_limit
        if limit <= 0:
            return []

        text = (query_text or "").strip() or self.settings.semantic_placeholder
        embedder = self.context.embedder
        index = self.context.vector_index

        try:
            embedding = await asyncio.wait_for(
                embedder.embed_query(text),
                timeout=self.settings.embedding_timeout_s,
            )
        except Exception as e:
            raise RetrievalUnavailable(
                f"Embedding no disponible: {e!r}", dependency=embedder.name
            ) from e

        try:
            hits = await asyncio.wait_for(
                index.query(embedding, limit),
                timeout=self.settings.vector_timeout_s,
            )
        except Exception as e:
            raise RetrievalUnavailable(
                f"Índice vectorial no disponible: {e!r}", dependency=index.name
            ) from e

        candidates = to_candidates(hits, limit)
        logger.info(
            "Candidatos semánticos",
            stage="semantic",
            requested=limit,
            found=len(candidates),
        )
        return candidates

    async def retrieve(
        self, query_text: str, limit: Optional[int] = None
    ) -> list[SemanticCandidate]:
        """
        Devuelve candidatos (id, similitud) ordenados por similitud desc.

        Ante falla del embedding o del índice devuelve [] y el pipeline
        continúa solo con el ranking estructurado.
        """
        try:
            return await self.retrieve_or_raise(query_text, limit)
        except RetrievalUnavailable as e:
            logger.warning(
                "Búsqueda semántica degradada",
                stage=e.stage,
                dependency=e.dependency,
                error=str(e),
            )
            return []
