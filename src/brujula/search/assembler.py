"""
Armado del resultado para el colaborador de presentación.

Proyección pura: trunca y copia campos, no recalcula nada.
"""

from dataclasses import asdict

from brujula.models import FusedResult, ResultItem


def to_item(result: FusedResult) -> ResultItem:
    prop = result.property
    breakdown = asdict(result.breakdown)
    breakdown["total"] = result.breakdown.total

    return ResultItem(
        id=prop.id,
        price=prop.price,
        rooms=prop.rooms,
        area=prop.area,
        property_type=prop.property_type,
        zone=prop.zone,
        features=list(prop.features),
        url=prop.url,
        score=result.score,
        floor=prop.floor,
        luminosity=prop.luminosity,
        exposure=prop.exposure,
        orientation=prop.orientation,
        renovation_state=prop.renovation_state,
        breakdown=breakdown,
    )


def assemble(fused: list[FusedResult], limit: int) -> list[ResultItem]:
    """Top `limit` del ranking, en el mismo orden."""
    return [to_item(result) for result in fused[: max(limit, 0)]]
