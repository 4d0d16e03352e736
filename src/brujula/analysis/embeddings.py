"""
Generador de embeddings para la búsqueda semántica.

Usa gemini-embedding-001. El modelo y la dimensión tienen que ser
los mismos con los que se indexó la colección de ChromaDB.
"""

from typing import Optional

from google import genai
from google.genai import types
import structlog
from tenacity import retry, stop_after_attempt, wait_exponential

from brujula.config import Settings, get_settings
from brujula.stores.base import Embedder

logger = structlog.get_logger()


class GeminiEmbedder(Embedder):
    """
    Genera el embedding de la parte subjetiva de la consulta
    ("piso luminoso y reformado cerca del parque").
    """

    name = "gemini_embeddings"

    def __init__(self, api_key: Optional[str] = None, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        api_key = api_key or settings.gemini_api_key

        if not api_key:
            raise ValueError(
                "GEMINI_API_KEY es requerida para embeddings. "
                "Groq no tiene modelos de embedding, usamos Gemini para esto."
            )

        self.client = genai.Client(api_key=api_key)
        self.model_name = settings.embedding_model
        self.output_dim = settings.embedding_dim
        logger.info("Embedder inicializado", model=self.model_name, dim=self.output_dim)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=4),
        reraise=True,
    )
    async def embed_query(self, text: str) -> list[float]:
        """
        Genera embedding para el texto de búsqueda.

        Returns:
            Vector de `embedding_dim` dimensiones
        """
        try:
            response = await self.client.aio.models.embed_content(
                model=self.model_name,
                contents=text,
                config=types.EmbedContentConfig(
                    task_type="RETRIEVAL_QUERY",
                    output_dimensionality=self.output_dim,
                ),
            )

            embedding = list(response.embeddings[0].values)
            logger.debug(
                "Embedding de query generado",
                text_length=len(text),
                embedding_dim=len(embedding),
            )
            return embedding

        except Exception as e:
            logger.error(
                "Error generando embedding de query",
                query=text[:50],
                error=str(e),
            )
            raise
