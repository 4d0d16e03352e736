"""
Motor de filtrado estructurado.

Traduce la intención a predicados obligatorios sobre el store
(precio, habitaciones, metros, tipo, características, zonas) y marca
con bonus a los candidatos semánticos sin excluir a nadie por eso.
"""

import asyncio
from typing import Iterable, Optional

import structlog
from pydantic import ValidationError

from brujula.context import SearchContext
from brujula.exceptions import FilterUnavailable
from brujula.models import Intent, Property, PropertyQuery, StructuredMatch, presort_key

logger = structlog.get_logger()


def sort_matches(matches: list[StructuredMatch]) -> list[StructuredMatch]:
    """Pre-orden barato: bonus desc, precio asc. El orden final lo define la fusión."""
    return sorted(
        matches,
        key=lambda m: presort_key(m.structural_bonus, m.property.price),
    )


def apply_candidate_hint(
    matches: list[StructuredMatch],
    candidate_ids: Optional[Iterable[str]],
    bonus: float,
) -> list[StructuredMatch]:
    """
    Marca con bonus las filas cuyo ID está en candidate_ids y reordena.

    Se usa cuando la query estructurada corrió sin la sugerencia
    (ramas en paralelo). Nunca agrega ni quita filas.
    """
    hinted = {str(c) for c in candidate_ids or ()}
    updated = [
        StructuredMatch(
            property=m.property,
            structural_bonus=bonus if m.property.id in hinted else 0.0,
        )
        for m in matches
    ]
    return sort_matches(updated)


class StructuredFilterEngine:
    """Rama estructurada del pipeline."""

    def __init__(self, context: SearchContext):
        self.context = context
        self.settings = context.settings

    def build_query(
        self,
        intent: Intent,
        candidate_ids: Optional[Iterable[str]] = None,
        uncapped: bool = False,
    ) -> PropertyQuery:
        return PropertyQuery.from_intent(
            intent,
            vocabulary=self.settings.feature_vocabulary,
            candidate_ids=candidate_ids,
            structural_bonus=self.settings.structural_bonus_value,
            limit=None if uncapped else self.settings.structured_limit,
        )

    async def filter(
        self,
        intent: Intent,
        candidate_ids: Optional[Iterable[str]] = None,
        uncapped: bool = False,
    ) -> list[StructuredMatch]:
        """
        Ejecuta la query estructurada.

        Args:
            intent: Intención validada
            candidate_ids: IDs sugeridos por la rama semántica (no restringen)
            uncapped: Traer todas las filas; quien llama trunca después de
                aplicar la sugerencia (modo paralelo)

        Returns:
            Inmuebles que cumplen todos los predicados, con su bonus

        Raises:
            FilterUnavailable: Si el store falla o excede el timeout
        """
        query = self.build_query(intent, candidate_ids, uncapped=uncapped)
        store = self.context.property_store

        try:
            rows = await asyncio.wait_for(
                store.find_properties(query),
                timeout=self.settings.store_timeout_s,
            )
        except Exception as e:
            logger.error(
                "Error en filtrado estructurado",
                stage="structured",
                dependency=store.name,
                error=repr(e),
            )
            raise FilterUnavailable(
                f"Store estructurado no disponible: {e!r}", dependency=store.name
            ) from e

        matches = self._hydrate(rows, query)
        logger.info(
            "Resultados estructurados",
            stage="structured",
            rows=len(rows),
            matches=len(matches),
            hinted=sum(1 for m in matches if m.structural_bonus),
        )
        return matches

    def _hydrate(self, rows: list[dict], query: PropertyQuery) -> list[StructuredMatch]:
        matches: list[StructuredMatch] = []
        seen: set[str] = set()

        for row in rows:
            try:
                prop = Property.model_validate(row)
            except ValidationError as e:
                logger.warning("Fila del store inválida", row_id=row.get("id"), error=str(e))
                continue

            if prop.id in seen:
                continue

            # El store es la autoridad, pero ningún falso positivo pasa a la fusión
            if not query.matches(prop):
                logger.warning("Fila descartada por no cumplir predicados", property_id=prop.id)
                continue

            seen.add(prop.id)
            matches.append(
                StructuredMatch(property=prop, structural_bonus=query.bonus_for(prop.id))
            )

        return sort_matches(matches)[: query.limit]
