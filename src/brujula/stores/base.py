"""
Puertos hacia los colaboradores externos.

El motor solo conoce estas interfaces; los adaptadores concretos
(Neo4j, ChromaDB, Gemini) y los fakes de test las implementan.
"""

from abc import ABC, abstractmethod

from brujula.models import PropertyQuery, VectorHit


class PropertyStore(ABC):
    """Store estructurado: hechos verificables de cada inmueble."""

    name: str = "store"

    @abstractmethod
    async def find_properties(self, query: PropertyQuery) -> list[dict]:
        """
        Devuelve los inmuebles que cumplen la conjunción de predicados.

        Cada fila trae zona y características aplanadas (str y lista),
        más structural_bonus según query.candidate_ids.
        """
        pass

    async def close(self) -> None:
        """Libera la conexión (si la hay)."""
        return None


class VectorIndex(ABC):
    """Índice vectorial de documentos semánticos."""

    name: str = "vector_index"

    @abstractmethod
    async def query(self, embedding: list[float], limit: int) -> list[VectorHit]:
        """
        Devuelve hasta `limit` hits más cercanos, ordenados por distancia.

        Args:
            embedding: Vector de la query
            limit: Máximo de resultados

        Returns:
            Lista de VectorHit (id, distancia coseno, metadata)
        """
        pass

    async def close(self) -> None:
        return None


class Embedder(ABC):
    """Servicio de embeddings."""

    name: str = "embedder"

    @abstractmethod
    async def embed_query(self, text: str) -> list[float]:
        pass
