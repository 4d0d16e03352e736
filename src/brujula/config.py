"""
Configuración centralizada del sistema.
Carga variables de entorno y define settings globales.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from brujula.normalization import normalize_feature

# config.py -> brujula/ -> src/ -> raíz del proyecto (donde está el .env)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


# Características que existen como nodos :Caracteristica en Neo4j.
# Es la única fuente del vocabulario: validación de intención y
# compilación de la query estructurada leen de acá (o del override en env).
DEFAULT_FEATURE_VOCABULARY = (
    "ascensor",
    "terraza",
    "balcon",
    "garaje",
    "parking",
    "piscina",
    "aire_acondicionado",
    "calefaccion",
    "amueblado",
    "trastero",
    "jardin",
    "zona_comunitaria",
    "cocina_equipada",
    "armarios_empotrados",
)


class Settings(BaseSettings):
    """Configuración principal de la aplicación."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Neo4j (store estructurado)
    neo4j_uri: str = Field("neo4j://localhost:7687", description="URI del servidor Neo4j")
    neo4j_user: str = Field("neo4j", description="Usuario de Neo4j")
    neo4j_password: str = Field("password", description="Password de Neo4j")
    neo4j_database: str = Field("idealista", description="Base de datos con los inmuebles")

    # ChromaDB (índice vectorial)
    chroma_host: str = Field("localhost", description="Host del servidor ChromaDB")
    chroma_port: int = Field(8000, description="Puerto del servidor ChromaDB")
    chroma_collection: str = Field(
        "inmuebles_idealista", description="Colección con los documentos semánticos"
    )

    # LLM Provider
    llm_provider: str = Field(
        "groq",
        description="Proveedor de LLM a usar: 'gemini' o 'groq'"
    )

    # Gemini
    gemini_api_key: Optional[str] = Field(None, description="API key de Google Gemini")
    gemini_model: str = Field("gemini-2.0-flash", description="Modelo de Gemini a usar")

    # Groq
    groq_api_key: Optional[str] = Field(None, description="API key de Groq")
    groq_model: str = Field(
        "llama-3.1-8b-instant",
        description="Modelo de Groq a usar (llama-3.1-8b-instant, llama-3.3-70b-versatile)"
    )

    # Embeddings (tiene que coincidir con el modelo usado al indexar)
    embedding_model: str = Field("gemini-embedding-001", description="Modelo de embedding")
    embedding_dim: int = Field(768, description="Dimensión de salida del embedding")

    # Timeouts de llamadas externas (segundos)
    embedding_timeout_s: float = Field(15.0, gt=0, description="Timeout del embedding de la query")
    vector_timeout_s: float = Field(10.0, gt=0, description="Timeout de la query a ChromaDB")
    store_timeout_s: float = Field(10.0, gt=0, description="Timeout de la query a Neo4j")
    llm_timeout_s: float = Field(30.0, gt=0, description="Timeout de las llamadas al LLM")

    # Búsqueda
    semantic_limit: int = Field(
        50, ge=1, description="Candidatos semánticos a pedir al índice (decenas, no unidades)"
    )
    structured_limit: int = Field(
        100, ge=1, description="Máximo de filas que devuelve el filtrado estructurado"
    )
    presentation_limit: int = Field(5, ge=1, description="Resultados a presentar")
    semantic_placeholder: str = Field(
        "vivienda",
        min_length=1,
        description="Texto a embeber cuando la intención no trae descripción",
    )
    min_plausible_price: float = Field(
        100.0,
        ge=0.0,
        description="Precios por debajo se descartan (confusión de unidades del LLM)",
    )
    parallel_retrieval: bool = Field(
        False, description="Ejecutar búsqueda semántica y estructurada en paralelo"
    )
    generate_explanation: bool = Field(
        True, description="Generar explicación en lenguaje natural de los resultados"
    )
    feature_vocabulary: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FEATURE_VOCABULARY),
        description="Características verificables en el store estructurado",
    )

    # Fusión (constantes de política, estables por despliegue)
    weight_semantic: float = Field(0.4, ge=0.0, description="Peso de la similitud semántica")
    weight_structural: float = Field(0.2, ge=0.0, description="Peso del bonus estructural")
    weight_features: float = Field(20.0, ge=0.0, description="Peso del ratio de obligatorias")
    weight_desired_features: float = Field(10.0, ge=0.0, description="Peso del ratio de deseadas")
    tag_bonus: float = Field(15.0, ge=0.0, description="Bonus plano por tag corroborado")
    semantic_miss_penalty: float = Field(
        10.0, ge=0.0, description="Penalización si no aparece en la búsqueda semántica"
    )
    weight_price_penalty: float = Field(5.0, ge=0.0, description="Peso de la penalización por precio")
    structural_bonus_value: float = Field(
        100.0, ge=0.0, description="Bonus que recibe un candidato semántico en Neo4j"
    )

    # Logging
    log_level: str = Field("INFO", description="Nivel de logging")

    @field_validator("feature_vocabulary")
    @classmethod
    def _normalize_vocabulary(cls, value: list[str]) -> list[str]:
        normalized = []
        for item in value:
            name = normalize_feature(item)
            if name and name not in normalized:
                normalized.append(name)
        return normalized


@lru_cache
def get_settings() -> Settings:
    """Obtiene la configuración cacheada."""
    return Settings()
