"""
Fusión y ranking.

Combina en un único score:
- Similitud semántica (o penalización fija si el inmueble no apareció)
- Bonus estructural (candidato semántico sugerido a Neo4j)
- Ratio de características obligatorias y deseadas cumplidas
- Bonus plano por cada tag descriptivo corroborado por atributos
- Penalización continua por precio relativo al máximo

Determinista: sin aleatoriedad ni reloj. La fusión solo reordena;
nunca excluye inmuebles.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from brujula.config import Settings
from brujula.models import (
    FusedResult,
    Intent,
    Property,
    ScoreBreakdown,
    SemanticCandidate,
    StructuredMatch,
)
from brujula.normalization import normalize_text


@dataclass(frozen=True)
class FusionWeights:
    """Constantes de política de la fusión (estables por despliegue)."""

    semantic: float = 0.4
    structural: float = 0.2
    features: float = 20.0
    desired_features: float = 10.0
    tag_bonus: float = 15.0
    semantic_miss_penalty: float = 10.0
    price_penalty: float = 5.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "FusionWeights":
        return cls(
            semantic=settings.weight_semantic,
            structural=settings.weight_structural,
            features=settings.weight_features,
            desired_features=settings.weight_desired_features,
            tag_bonus=settings.tag_bonus,
            semantic_miss_penalty=settings.semantic_miss_penalty,
            price_penalty=settings.weight_price_penalty,
        )


@dataclass(frozen=True)
class DescriptiveTag:
    """Tag subjetivo de la descripción y el atributo que lo corrobora."""

    name: str
    keywords: tuple[str, ...]
    attribute: str
    corroborates: Callable[[str], bool]

    def mentioned_in(self, description: str) -> bool:
        return any(keyword in description for keyword in self.keywords)

    def corroborated_by(self, prop: Property) -> bool:
        value = getattr(prop, self.attribute, None)
        if not value:
            return False
        return self.corroborates(normalize_text(value))


DESCRIPTIVE_TAGS: tuple[DescriptiveTag, ...] = (
    DescriptiveTag("luminoso", ("luminoso", "luminosa"), "luminosity", lambda v: "luminos" in v),
    DescriptiveTag("exterior", ("exterior",), "exposure", lambda v: v == "exterior"),
    DescriptiveTag("planta baja", ("planta baja",), "floor", lambda v: "bajo" in v or "baja" in v),
    DescriptiveTag("reformado", ("reformado", "reformada"), "renovation_state", lambda v: "reformad" in v),
)


def _ratio(wanted: tuple[str, ...], owned: tuple[str, ...]) -> float:
    if not wanted:
        return 0.0
    owned_set = set(owned)
    return sum(1 for f in wanted if f in owned_set) / len(wanted)


def score_property(
    match: StructuredMatch,
    similarity: Optional[float],
    intent: Intent,
    weights: FusionWeights,
    tags: tuple[DescriptiveTag, ...] = DESCRIPTIVE_TAGS,
) -> ScoreBreakdown:
    """Calcula las contribuciones de un inmueble. similarity=None si no apareció en la semántica."""
    prop = match.property

    if similarity is not None:
        semantic = similarity * weights.semantic
    else:
        semantic = -weights.semantic_miss_penalty

    structural = match.structural_bonus * weights.structural
    features = _ratio(intent.required_features, prop.features) * weights.features
    desired = _ratio(intent.desired_features, prop.features) * weights.desired_features

    description = normalize_text(intent.semantic_description)
    matched_tags = tuple(
        tag.name for tag in tags if tag.mentioned_in(description) and tag.corroborated_by(prop)
    )

    price_penalty = 0.0
    if intent.price_max and prop.price is not None:
        price_penalty = (prop.price / intent.price_max) * weights.price_penalty

    return ScoreBreakdown(
        semantic=semantic,
        structural=structural,
        features=features,
        desired_features=desired,
        tags=len(matched_tags) * weights.tag_bonus,
        price_penalty=price_penalty,
        semantic_hit=similarity is not None,
        similarity=similarity,
        matched_tags=matched_tags,
    )


def fuse(
    semantic: list[SemanticCandidate],
    structured: list[StructuredMatch],
    intent: Intent,
    weights: Optional[FusionWeights] = None,
) -> list[FusedResult]:
    """
    Fusiona ambas ramas en un ranking único.

    Orden: score desc, precio asc (sin precio al final), posición en la
    rama estructurada. Todo inmueble estructurado aparece exactamente una vez.
    """
    weights = weights or FusionWeights()

    similarity_by_id: dict[str, float] = {}
    for candidate in semantic:
        current = similarity_by_id.get(candidate.property_id)
        if current is None or candidate.similarity > current:
            similarity_by_id[candidate.property_id] = candidate.similarity

    scored: list[tuple[int, FusedResult]] = []
    for position, match in enumerate(structured):
        breakdown = score_property(
            match, similarity_by_id.get(match.property.id), intent, weights
        )
        scored.append(
            (position, FusedResult(property=match.property, score=breakdown.total, breakdown=breakdown))
        )

    scored.sort(
        key=lambda item: (
            -item[1].score,
            item[1].property.price is None,
            item[1].property.price if item[1].property.price is not None else 0.0,
            item[0],
        )
    )
    return [result for _, result in scored]
