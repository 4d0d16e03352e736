"""
Definición tipada de la consulta al store estructurado.

Es la interfaz lógica con el store: conjunción de predicados sobre rangos
numéricos, igualdad de strings, pertenencia a zonas y existencia de
relaciones con características. Los adaptadores la compilan a su lenguaje
(Cypher para Neo4j); matches() la evalúa en memoria con la misma semántica.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from brujula.models.intent import Intent
from brujula.models.property import Property


@dataclass(frozen=True)
class PropertyQuery:
    """Predicados obligatorios + sugerencia blanda de IDs semánticos."""

    price_min: Optional[float] = None
    price_max: Optional[float] = None
    rooms_min: Optional[float] = None
    rooms_max: Optional[float] = None
    area_min: Optional[float] = None
    property_type: Optional[str] = None
    required_features: tuple[str, ...] = ()
    preferred_zones: tuple[str, ...] = ()

    # Sugerencia: no restringe, solo marca con bonus
    candidate_ids: Optional[tuple[str, ...]] = None
    structural_bonus: float = 100.0
    # None: sin tope de filas
    limit: Optional[int] = 100

    @classmethod
    def from_intent(
        cls,
        intent: Intent,
        vocabulary: Iterable[str],
        candidate_ids: Optional[Iterable[str]] = None,
        structural_bonus: float = 100.0,
        limit: Optional[int] = 100,
    ) -> "PropertyQuery":
        vocab = set(vocabulary)
        hint = None
        if candidate_ids is not None:
            hint = tuple(dict.fromkeys(str(c) for c in candidate_ids))

        return cls(
            price_min=intent.price_min,
            price_max=intent.price_max,
            rooms_min=intent.rooms_min,
            rooms_max=intent.rooms_max,
            area_min=intent.area_min,
            property_type=intent.property_type,
            required_features=tuple(f for f in intent.required_features if f in vocab),
            preferred_zones=tuple(z.lower() for z in intent.preferred_zones),
            candidate_ids=hint or None,
            structural_bonus=structural_bonus,
            limit=limit,
        )

    def bonus_for(self, property_id: str) -> float:
        if self.candidate_ids and str(property_id) in self.candidate_ids:
            return self.structural_bonus
        return 0.0

    def matches(self, prop: Property) -> bool:
        """True si el inmueble cumple todos los predicados obligatorios presentes."""
        if not _within(prop.price, self.price_min, self.price_max):
            return False
        if not _within(prop.rooms, self.rooms_min, self.rooms_max):
            return False
        if not _within(prop.area, self.area_min, None):
            return False

        if self.property_type is not None:
            if not prop.property_type:
                return False
            if prop.property_type.lower() != self.property_type.lower():
                return False

        if self.required_features:
            owned = set(prop.features)
            if any(feature not in owned for feature in self.required_features):
                return False

        if self.preferred_zones:
            zone = (prop.zone or "").lower()
            if not zone:
                return False
            if not any(z in zone or z == zone for z in self.preferred_zones):
                return False

        return True


def _within(value: Optional[float], low: Optional[float], high: Optional[float]) -> bool:
    if low is None and high is None:
        return True
    if value is None:
        return False
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


def presort_key(match_bonus: float, price: Optional[float]) -> tuple:
    """Orden barato previo a la fusión: bonus desc, precio asc (sin precio al final)."""
    return (-match_bonus, price is None, price if price is not None else 0.0)
