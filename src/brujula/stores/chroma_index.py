"""
Índice vectorial sobre ChromaDB.

La colección se indexa con embeddings manuales (sin embedding function)
y espacio coseno, así que distance = 1 - cos.
"""

from typing import Optional

import chromadb
import structlog

from brujula.config import Settings, get_settings
from brujula.models import VectorHit
from brujula.stores.base import VectorIndex

logger = structlog.get_logger()


class ChromaVectorIndex(VectorIndex):
    """Adaptador de consulta sobre una colección de ChromaDB (cliente HTTP async)."""

    name = "chromadb"

    def __init__(self, collection):
        self._collection = collection

    @classmethod
    async def connect(cls, settings: Optional[Settings] = None) -> "ChromaVectorIndex":
        """
        Conecta al servidor y obtiene (o crea vacía) la colección.

        Raises:
            Exception: Si el heartbeat falla
        """
        settings = settings or get_settings()
        try:
            client = await chromadb.AsyncHttpClient(
                host=settings.chroma_host,
                port=settings.chroma_port,
            )
            await client.heartbeat()
            collection = await client.get_or_create_collection(
                name=settings.chroma_collection,
                metadata={"hnsw:space": "cosine"},
            )
        except Exception as e:
            logger.error(
                "Error conectando a ChromaDB",
                host=settings.chroma_host,
                port=settings.chroma_port,
                error=str(e),
            )
            raise

        logger.info(
            "ChromaDB conectado",
            host=settings.chroma_host,
            collection=settings.chroma_collection,
        )
        return cls(collection)

    async def query(self, embedding: list[float], limit: int) -> list[VectorHit]:
        # Sin filtros `where`: la semántica no debe recortar el recall
        results = await self._collection.query(
            query_embeddings=[embedding],
            n_results=limit,
            include=["distances", "metadatas"],
        )

        ids = (results.get("ids") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]
        metadatas = (results.get("metadatas") or [[]])[0] or [None] * len(ids)

        return [
            VectorHit(id=str(hit_id), distance=float(distance), metadata=dict(metadata or {}))
            for hit_id, distance, metadata in zip(ids, distances, metadatas)
        ]
