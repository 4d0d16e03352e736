"""
Explicación en lenguaje natural de los resultados rankeados.

Colaborador de presentación: recibe lo que arma el Result Assembler y
nunca recalcula scores. Si el LLM falla, devuelve un texto fijo.
"""

import asyncio
from typing import Optional

import structlog

from brujula.analysis.llm_providers import BaseLLMProvider, get_llm_provider
from brujula.config import Settings, get_settings
from brujula.models import Intent, ResultItem

logger = structlog.get_logger()

FALLBACK_EXPLANATION = "Resultados encontrados."

EXPLAIN_SYSTEM_PROMPT = "Eres un asistente inmobiliario experto. Respondes en español, sin inventar datos."

EXPLAIN_USER_PROMPT_TEMPLATE = """El usuario preguntó:
"{query}"

Análisis:
- Precio máximo: {price_max}
- Habitaciones: {rooms}
- Características: {features}
- Aspectos semánticos: "{description}"

Resultados ({total} total, top {shown}):

{results}

Genera una respuesta natural destacando 2-3 mejores opciones y explicando por qué son buenas."""


class ResponseExplainer:
    """Resume el top de resultados para el usuario."""

    def __init__(
        self,
        provider: Optional[BaseLLMProvider] = None,
        settings: Optional[Settings] = None,
    ):
        self._settings = settings or get_settings()
        self._provider: BaseLLMProvider = provider or get_llm_provider(self._settings)

    def _format_item(self, position: int, item: ResultItem) -> str:
        extras = [
            value
            for value in (item.floor and f"Planta: {item.floor}", item.luminosity, item.exposure, item.renovation_state)
            if value
        ]
        lines = [
            f"{position}. {item.property_type or 'Inmueble'} en {item.zone or 'zona desconocida'}",
            f"   - Precio: {_number(item.price)}€/mes",
            f"   - {_number(item.rooms)} habitaciones, {_number(item.area)}m²",
            f"   - Características: {', '.join(item.features[:5]) or 'sin especificar'}",
        ]
        if extras:
            lines.append(f"   - Detalles: {', '.join(extras)}")
        lines.append(f"   - Score: {item.score:.1f}")
        lines.append(f"   - URL: {item.url or 'No disponible'}")
        return "\n".join(lines)

    def _build_prompt(self, query: str, intent: Intent, items: list[ResultItem], total: int) -> str:
        return EXPLAIN_USER_PROMPT_TEMPLATE.format(
            query=query,
            price_max=f"{_number(intent.price_max)}€" if intent.price_max is not None else "sin límite",
            rooms=f"{_number(intent.rooms_min)}+" if intent.rooms_min is not None else "sin mínimo",
            features=", ".join(intent.required_features) or "ninguna",
            description=intent.semantic_description,
            total=total,
            shown=len(items),
            results="\n\n".join(self._format_item(i + 1, item) for i, item in enumerate(items)),
        )

    async def explain(
        self,
        query: str,
        intent: Intent,
        items: list[ResultItem],
        total: int,
    ) -> str:
        """Genera la explicación; ante cualquier error devuelve FALLBACK_EXPLANATION."""
        if not items:
            return FALLBACK_EXPLANATION

        try:
            response = await asyncio.wait_for(
                self._provider.generate(
                    system_prompt=EXPLAIN_SYSTEM_PROMPT,
                    user_prompt=self._build_prompt(query, intent, items, total),
                    temperature=0.7,
                    max_tokens=800,
                ),
                timeout=self._settings.llm_timeout_s,
            )
            return response.text or FALLBACK_EXPLANATION

        except Exception as e:
            logger.warning(
                "Error generando explicación",
                dependency=self._provider.provider_name,
                error=str(e),
            )
            return FALLBACK_EXPLANATION


def _number(value: Optional[float]) -> str:
    if value is None:
        return "?"
    return f"{value:g}"
