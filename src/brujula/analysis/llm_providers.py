"""
Proveedores LLM para los dos pasos conversacionales del motor:
extraer la intención de la consulta y explicar el ranking.

El motor nunca depende de un proveedor concreto; se elige por
configuración (LLM_PROVIDER=gemini|groq).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from google import genai
from google.genai import types
from groq import AsyncGroq
import structlog

from brujula.config import Settings, get_settings

logger = structlog.get_logger()


@dataclass
class LLMResponse:
    """Texto generado más datos de trazabilidad."""
    text: str
    model: str
    provider: str
    tokens_used: Optional[int] = None


class BaseLLMProvider(ABC):
    """Interfaz común de los proveedores."""

    provider_name: str = "base"

    @abstractmethod
    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.2,
        max_tokens: int = 1024,
        json_output: bool = False,
    ) -> LLMResponse:
        """
        Genera una respuesta.

        Args:
            system_prompt: Rol e instrucciones fijas
            user_prompt: Consulta o datos a resumir
            temperature: 0.0-1.0 (bajo para extracción, alto para explicación)
            max_tokens: Tope de tokens de salida
            json_output: Forzar respuesta en JSON (extracción de intención)
        """
        pass


class GeminiProvider(BaseLLMProvider):
    """Google Gemini vía google-genai (cliente async en client.aio)."""

    provider_name = "gemini"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
    ):
        settings = settings or get_settings()
        api_key = api_key or settings.gemini_api_key
        if not api_key:
            raise ValueError("GEMINI_API_KEY no configurada")

        self.model = model or settings.gemini_model
        self.client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(settings.llm_timeout_s * 1000)),
        )
        logger.info("Proveedor LLM listo", provider=self.provider_name, model=self.model)

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.2,
        max_tokens: int = 1024,
        json_output: bool = False,
    ) -> LLMResponse:
        config = types.GenerateContentConfig(
            system_instruction=system_prompt,
            temperature=temperature,
            max_output_tokens=max_tokens,
            response_mime_type="application/json" if json_output else None,
        )
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=user_prompt,
            config=config,
        )

        usage = response.usage_metadata
        return LLMResponse(
            text=(response.text or "").strip(),
            model=self.model,
            provider=self.provider_name,
            tokens_used=usage.total_token_count if usage else None,
        )


class GroqProvider(BaseLLMProvider):
    """
    Groq (API compatible con OpenAI).

    llama-3.1-8b-instant alcanza para extraer la intención; para
    explicaciones más cuidadas conviene llama-3.3-70b-versatile.
    """

    provider_name = "groq"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
    ):
        settings = settings or get_settings()
        api_key = api_key or settings.groq_api_key
        if not api_key:
            raise ValueError("GROQ_API_KEY no configurada")

        self.model = model or settings.groq_model
        self.client = AsyncGroq(api_key=api_key, timeout=settings.llm_timeout_s)
        logger.info("Proveedor LLM listo", provider=self.provider_name, model=self.model)

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.2,
        max_tokens: int = 1024,
        json_output: bool = False,
    ) -> LLMResponse:
        extra = {"response_format": {"type": "json_object"}} if json_output else {}
        completion = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
            **extra,
        )

        message = completion.choices[0].message.content or ""
        return LLMResponse(
            text=message.strip(),
            model=self.model,
            provider=self.provider_name,
            tokens_used=completion.usage.total_tokens if completion.usage else None,
        )


PROVIDERS: dict[str, type[BaseLLMProvider]] = {
    GeminiProvider.provider_name: GeminiProvider,
    GroqProvider.provider_name: GroqProvider,
}


def get_llm_provider(
    settings: Optional[Settings] = None,
    provider: Optional[str] = None,
) -> BaseLLMProvider:
    """
    Instancia el proveedor configurado.

    Raises:
        ValueError: Si el proveedor no existe o falta su API key
    """
    settings = settings or get_settings()
    name = (provider or settings.llm_provider).lower()

    provider_cls = PROVIDERS.get(name)
    if provider_cls is None:
        raise ValueError(
            f"Proveedor LLM no soportado: {name}. Opciones: {', '.join(PROVIDERS)}"
        )
    return provider_cls(settings=settings)
