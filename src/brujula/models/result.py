"""
Resultados del motor: ranking fusionado y respuesta final.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from brujula.models.intent import Intent
from brujula.models.property import Property


@dataclass(frozen=True)
class ScoreBreakdown:
    """Contribuciones individuales que producen el score de fusión."""

    semantic: float = 0.0
    structural: float = 0.0
    features: float = 0.0
    desired_features: float = 0.0
    tags: float = 0.0
    price_penalty: float = 0.0
    semantic_hit: bool = False
    similarity: Optional[float] = None
    matched_tags: tuple[str, ...] = ()

    @property
    def total(self) -> float:
        return (
            self.semantic
            + self.structural
            + self.features
            + self.desired_features
            + self.tags
            - self.price_penalty
        )


@dataclass(frozen=True)
class FusedResult:
    """Inmueble rankeado. Se crea una vez en la fusión y no se modifica."""

    property: Property
    score: float
    breakdown: ScoreBreakdown


class SearchStatus(str, Enum):
    """Únicos estados terminales expuestos a quien llama."""

    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


class ResultItem(BaseModel):
    """Entrada lista para el colaborador que formatea/explica."""

    id: str
    price: Optional[float] = None
    rooms: Optional[float] = None
    area: Optional[float] = None
    property_type: Optional[str] = None
    zone: Optional[str] = None
    features: list[str] = Field(default_factory=list)
    url: Optional[str] = None
    score: float

    floor: Optional[str] = None
    luminosity: Optional[str] = None
    exposure: Optional[str] = None
    orientation: Optional[str] = None
    renovation_state: Optional[str] = None

    breakdown: dict = Field(default_factory=dict)


class SearchResponse(BaseModel):
    """Respuesta del motor para una consulta."""

    status: SearchStatus
    message: str = ""
    results: list[ResultItem] = Field(default_factory=list)
    total: int = 0
    intent: Optional[Intent] = None
    explanation: Optional[str] = None
