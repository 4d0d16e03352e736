"""
Acceso a los stores externos.

Provee los puertos del motor y sus adaptadores para Neo4j y ChromaDB.
"""

from brujula.stores.base import Embedder, PropertyStore, VectorIndex
from brujula.stores.neo4j_store import Neo4jPropertyStore, build_cypher
from brujula.stores.chroma_index import ChromaVectorIndex

__all__ = [
    "Embedder",
    "PropertyStore",
    "VectorIndex",
    "Neo4jPropertyStore",
    "build_cypher",
    "ChromaVectorIndex",
]
