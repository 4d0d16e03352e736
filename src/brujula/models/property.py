"""
Inmuebles y candidatos de cada rama de búsqueda.

Los Property pertenecen al store estructurado: acá solo se leen.
Candidatos y resultados fusionados se crean por consulta y se descartan.
"""

from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Property(BaseModel):
    """Inmueble tal como lo devuelve el store, con zona y features aplanadas."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., description="ID único del inmueble")
    price: Optional[float] = Field(None, description="Precio mensual en €")
    rooms: Optional[float] = Field(None, description="Habitaciones")
    area: Optional[float] = Field(None, description="Superficie en m²")
    property_type: Optional[str] = Field(None, description="piso, ático, chalet...")
    url: Optional[str] = Field(None, description="URL del anuncio")
    zone: Optional[str] = Field(None, description="Zona asociada (0 o 1)")
    features: tuple[str, ...] = Field(default=(), description="Características del inmueble")

    # Atributos descriptivos (no verificables como filtro, sí para corroborar tags)
    floor: Optional[str] = Field(None, description="Planta: 1ª, bajo, ático...")
    luminosity: Optional[str] = Field(None, description="muy luminoso, luminoso, interior...")
    exposure: Optional[str] = Field(None, description="exterior o interior")
    orientation: Optional[str] = Field(None, description="Norte, Sur, Este, Oeste")
    renovation_state: Optional[str] = Field(None, description="reformado, a reformar...")

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value):
        return str(value) if value is not None else value

    @field_validator("features", mode="before")
    @classmethod
    def _features_as_tuple(cls, value):
        if value is None:
            return ()
        return tuple(v for v in value if v)


@dataclass(frozen=True)
class SemanticCandidate:
    """Candidato del índice vectorial. similarity en [0, 100]."""

    property_id: str
    similarity: float


@dataclass(frozen=True)
class VectorHit:
    """Fila cruda devuelta por el índice vectorial."""

    id: str
    distance: float
    metadata: dict = field(default_factory=dict)


@dataclass(frozen=True)
class StructuredMatch:
    """Inmueble que cumple los predicados obligatorios, con su bonus de sugerencia."""

    property: Property
    structural_bonus: float = 0.0
