"""
Motor de búsqueda híbrida.

Flujo por consulta:
1. Validar la intención (si falla: status failed, no se busca nada)
2. Rama semántica (índice vectorial) y rama estructurada (Neo4j)
3. Fusión de ambas señales en un ranking único
4. Armado del top para presentación (+ explicación opcional)
"""

import asyncio
from typing import Optional

import structlog

from brujula.context import SearchContext
from brujula.exceptions import FilterUnavailable, IntentParseError
from brujula.models import (
    Intent,
    SearchResponse,
    SearchStatus,
    SemanticCandidate,
    StructuredMatch,
)
from brujula.search.assembler import assemble
from brujula.search.fusion import FusionWeights, fuse
from brujula.search.intent import Payload, parse_intent
from brujula.search.semantic import SemanticRetriever
from brujula.search.structured import StructuredFilterEngine, apply_candidate_hint

logger = structlog.get_logger()

MESSAGE_FAILED = "No pude procesar tu consulta. Intenta reformularla."
MESSAGE_EMPTY = "No encontré inmuebles con esos criterios. Intenta ser menos específico."
MESSAGE_OK = "Encontré {total} inmuebles."


class HybridSearchEngine:
    """
    Orquesta intención -> {semántica, estructurada} -> fusión -> resultado.

    No guarda estado entre consultas: todo lo que crea vive lo que dura
    la llamada a search().
    """

    def __init__(self, context: SearchContext, weights: Optional[FusionWeights] = None):
        self.context = context
        self.settings = context.settings
        self.weights = weights or FusionWeights.from_settings(self.settings)
        self.semantic = SemanticRetriever(context)
        self.structured = StructuredFilterEngine(context)

    async def search_text(self, query: str) -> SearchResponse:
        """
        Busca a partir de una consulta en lenguaje natural.

        El extractor (LLM) produce el payload de intención; cualquier
        falla ahí termina en status failed.
        """
        extractor = self.context.intent_extractor
        if extractor is None:
            logger.error("Sin extractor de intención configurado", stage="intent")
            return SearchResponse(status=SearchStatus.FAILED, message=MESSAGE_FAILED)

        try:
            payload = await extractor.extract(query)
        except IntentParseError as e:
            logger.warning("No se pudo extraer la intención", stage=e.stage, error=str(e))
            return SearchResponse(status=SearchStatus.FAILED, message=MESSAGE_FAILED)

        return await self.search(payload, query_text=query)

    async def search(self, payload: Payload, query_text: Optional[str] = None) -> SearchResponse:
        """
        Busca a partir del payload de intención ya producido por el extractor.

        Args:
            payload: dict o JSON con los campos de la intención
            query_text: Consulta original (solo para la explicación)

        Returns:
            SearchResponse con status ok, empty o failed
        """
        try:
            intent = parse_intent(payload, self.settings)
        except IntentParseError as e:
            logger.warning("Intención inválida", stage=e.stage, error=str(e))
            return SearchResponse(status=SearchStatus.FAILED, message=MESSAGE_FAILED)

        return await self.run(intent, query_text=query_text)

    async def run(self, intent: Intent, query_text: Optional[str] = None) -> SearchResponse:
        """Ejecuta el pipeline para una intención ya validada."""
        logger.info(
            "Intención detectada",
            price_max=intent.price_max,
            rooms_min=intent.rooms_min,
            required_features=list(intent.required_features),
            preferred_zones=list(intent.preferred_zones),
            semantic_description=intent.semantic_description,
            has_constraints=intent.has_constraints,
        )

        try:
            semantic, structured = await self._retrieve(intent)
        except FilterUnavailable as e:
            # Sin store no hay inmuebles verificables: se informa "sin resultados"
            logger.error(
                "Store estructurado no disponible, sin resultados",
                stage=e.stage,
                dependency=e.dependency,
                error=str(e),
            )
            return SearchResponse(status=SearchStatus.EMPTY, message=MESSAGE_EMPTY, intent=intent)

        if not structured:
            logger.info("Sin inmuebles que cumplan los filtros", semantic_candidates=len(semantic))
            return SearchResponse(status=SearchStatus.EMPTY, message=MESSAGE_EMPTY, intent=intent)

        fused = fuse(semantic, structured, intent, self.weights)
        items = assemble(fused, self.settings.presentation_limit)

        explanation = None
        if self.settings.generate_explanation and self.context.explainer is not None:
            explanation = await self.context.explainer.explain(
                query_text or intent.semantic_description,
                intent,
                items,
                total=len(fused),
            )

        logger.info(
            "Búsqueda completada",
            semantic=len(semantic),
            structured=len(structured),
            returned=len(items),
            top_score=round(fused[0].score, 2),
        )

        return SearchResponse(
            status=SearchStatus.OK,
            message=MESSAGE_OK.format(total=len(fused)),
            results=items,
            total=len(fused),
            intent=intent,
            explanation=explanation,
        )

    async def _retrieve(
        self, intent: Intent
    ) -> tuple[list[SemanticCandidate], list[StructuredMatch]]:
        limit = self.settings.semantic_limit

        if not self.settings.parallel_retrieval:
            semantic = await self.semantic.retrieve(intent.semantic_query, limit)
            candidate_ids = [c.property_id for c in semantic] or None
            structured = await self.structured.filter(intent, candidate_ids)
            return semantic, structured

        # En paralelo la query estructurada corre sin sugerencia ni tope: el bonus
        # se aplica al unir y recién ahí se trunca, igual que en modo secuencial
        semantic_task = asyncio.create_task(self.semantic.retrieve(intent.semantic_query, limit))
        structured_task = asyncio.create_task(self.structured.filter(intent, uncapped=True))
        try:
            semantic, structured = await asyncio.gather(semantic_task, structured_task)
        except BaseException:
            for task in (semantic_task, structured_task):
                task.cancel()
            raise

        structured = apply_candidate_hint(
            structured,
            [c.property_id for c in semantic],
            self.settings.structural_bonus_value,
        )
        return semantic, structured[: self.settings.structured_limit]
