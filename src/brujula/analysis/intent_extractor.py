"""
Adaptador al LLM que extrae la intención de una consulta en lenguaje natural.

Solo arma el prompt y devuelve el texto crudo: la validación del
resultado vive en brujula.search.intent.
"""

import asyncio
from typing import Optional

import structlog
from tenacity import retry, stop_after_attempt, wait_exponential

from brujula.analysis.llm_providers import BaseLLMProvider, get_llm_provider
from brujula.config import Settings, get_settings
from brujula.exceptions import IntentParseError

logger = structlog.get_logger()


INTENT_SYSTEM_PROMPT = "Eres un asistente experto en análisis de consultas inmobiliarias. Respondes solo JSON."

INTENT_USER_PROMPT_TEMPLATE = """IMPORTANTE:
- Extrae SOLO características que existan en esta lista: {vocabulary}
- Si mencionan "luminoso", "exterior", "reformado", "planta baja": NO las pongas en caracteristicas_obligatorias, ponlas en descripcion_semantica
- Las zonas deben ser nombres reales de barrios/ciudades en España
- Si no se menciona precio, usa null

Devuelve SOLO un JSON válido:

{{
  "precio_maximo": number | null,
  "precio_minimo": number | null,
  "habitaciones_minimas": number | null,
  "habitaciones_maximas": number | null,
  "metros_minimos": number | null,
  "caracteristicas_obligatorias": array (solo características físicas verificables),
  "caracteristicas_deseadas": array,
  "zonas_preferidas": array,
  "tipo_vivienda": string | null,
  "descripcion_semantica": string (aspectos subjetivos como luminoso, reformado, tranquilo, planta baja, exterior)
}}

Consulta: "{query}\""""


class IntentExtractor:
    """Pide al LLM la intención estructurada de una consulta."""

    def __init__(
        self,
        provider: Optional[BaseLLMProvider] = None,
        settings: Optional[Settings] = None,
    ):
        self._settings = settings or get_settings()
        self._provider: BaseLLMProvider = provider or get_llm_provider(self._settings)

    def _build_prompt(self, query: str) -> str:
        vocabulary = ", ".join(f'"{name}"' for name in self._settings.feature_vocabulary)
        return INTENT_USER_PROMPT_TEMPLATE.format(vocabulary=vocabulary, query=query)

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=1, min=1, max=4),
        reraise=True,
    )
    async def _generate(self, prompt: str) -> str:
        response = await asyncio.wait_for(
            self._provider.generate(
                system_prompt=INTENT_SYSTEM_PROMPT,
                user_prompt=prompt,
                temperature=0.1,
                max_tokens=500,
                json_output=True,
            ),
            timeout=self._settings.llm_timeout_s,
        )
        return response.text

    async def extract(self, query: str) -> str:
        """
        Devuelve el payload crudo (JSON como texto) para la consulta.

        Raises:
            IntentParseError: Si la consulta está vacía o el LLM no responde
        """
        if not query or not query.strip():
            raise IntentParseError("Consulta vacía")

        try:
            text = await self._generate(self._build_prompt(query.strip()))
        except Exception as e:
            logger.error(
                "Error extrayendo intención",
                stage="intent",
                dependency=self._provider.provider_name,
                error=str(e),
            )
            raise IntentParseError(
                f"El extractor de intención falló: {e}",
                dependency=self._provider.provider_name,
            ) from e

        if not text:
            raise IntentParseError(
                "El extractor devolvió una respuesta vacía",
                dependency=self._provider.provider_name,
            )
        return text
