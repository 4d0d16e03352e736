import pytest

from brujula.models import Intent, Property, SemanticCandidate, StructuredMatch
from brujula.search.fusion import FusionWeights, fuse, score_property


def _match(id, bonus=0.0, **kwargs) -> StructuredMatch:
    return StructuredMatch(property=Property(id=str(id), **kwargs), structural_bonus=bonus)


def _intent(**kwargs) -> Intent:
    kwargs.setdefault("semantic_description", "vivienda")
    return Intent(**kwargs)


WEIGHTS = FusionWeights()


def test_semantic_hit_and_miss_terms():
    intent = _intent()

    hit = score_property(_match("1"), 80.0, intent, WEIGHTS)
    miss = score_property(_match("1"), None, intent, WEIGHTS)

    assert hit.semantic == pytest.approx(32)
    assert hit.semantic_hit
    assert miss.semantic == -10
    assert not miss.semantic_hit


def test_zero_similarity_counts_as_hit():
    breakdown = score_property(_match("1"), 0.0, _intent(), WEIGHTS)

    assert breakdown.semantic == 0
    assert breakdown.semantic_hit


def test_structural_bonus_term():
    breakdown = score_property(_match("1", bonus=100), None, _intent(), WEIGHTS)

    assert breakdown.structural == pytest.approx(20)


def test_feature_ratios():
    intent = _intent(required_features=("ascensor", "terraza"), desired_features=("garaje",))
    match = _match("1", features=["ascensor", "garaje"])

    breakdown = score_property(match, None, intent, WEIGHTS)

    assert breakdown.features == pytest.approx(10)
    assert breakdown.desired_features == pytest.approx(10)


def test_no_required_features_contributes_zero():
    breakdown = score_property(_match("1", features=["ascensor"]), None, _intent(), WEIGHTS)

    assert breakdown.features == 0
    assert breakdown.desired_features == 0


def test_tags_need_mention_and_corroboration():
    intent = _intent(semantic_description="Piso luminoso y exterior, reformado")
    match = _match(
        "1",
        luminosity="Muy luminoso",
        exposure="interior",
        renovation_state="Reformado",
    )

    breakdown = score_property(match, None, intent, WEIGHTS)

    assert breakdown.matched_tags == ("luminoso", "reformado")
    assert breakdown.tags == pytest.approx(30)


def test_tag_not_mentioned_gives_no_bonus():
    match = _match("1", floor="Bajo", exposure="exterior")

    breakdown = score_property(match, None, _intent(semantic_description="tranquilo"), WEIGHTS)

    assert breakdown.matched_tags == ()
    assert breakdown.tags == 0


def test_planta_baja_tag():
    intent = _intent(semantic_description="planta baja con patio")

    assert score_property(_match("1", floor="Bajo"), None, intent, WEIGHTS).matched_tags == ("planta baja",)
    assert score_property(_match("2", floor="3ª"), None, intent, WEIGHTS).matched_tags == ()


def test_price_penalty():
    intent = _intent(price_max=1500)

    assert score_property(_match("1", price=1200), None, intent, WEIGHTS).price_penalty == pytest.approx(4)
    assert score_property(_match("2", price=None), None, intent, WEIGHTS).price_penalty == 0
    assert score_property(_match("3", price=1200), None, _intent(), WEIGHTS).price_penalty == 0


def test_total_is_sum_of_terms():
    intent = _intent(price_max=1000, required_features=("ascensor",), semantic_description="luminoso")
    match = _match("1", bonus=100, price=500, features=["ascensor"], luminosity="luminoso")

    breakdown = score_property(match, 50.0, intent, WEIGHTS)

    assert breakdown.total == pytest.approx(20 + 20 + 20 + 15 - 2.5)


def test_scenario_b_semantic_hit_ranks_first():
    structured = [_match(i, bonus=100 if i == 5 else 0, price=1000 + i) for i in range(1, 11)]
    semantic = [SemanticCandidate(property_id="5", similarity=90.0)]

    ranking = fuse(semantic, structured, _intent())

    assert ranking[0].property.id == "5"
    assert ranking[0].score > ranking[1].score


def test_every_structured_property_appears_once():
    structured = [_match(i, price=900 + i) for i in range(20)]
    semantic = [
        SemanticCandidate(property_id="3", similarity=50.0),
        SemanticCandidate(property_id="3", similarity=70.0),
        SemanticCandidate(property_id="999", similarity=99.0),
    ]

    ranking = fuse(semantic, structured, _intent())

    ids = [r.property.id for r in ranking]
    assert sorted(ids) == sorted(m.property.id for m in structured)
    assert "999" not in ids
    three = next(r for r in ranking if r.property.id == "3")
    assert three.breakdown.similarity == 70.0


def test_ranking_is_non_increasing_and_deterministic():
    structured = [
        _match(i, bonus=100 if i % 3 == 0 else 0, price=800 + (i * 37) % 500, features=["ascensor"] if i % 2 else [])
        for i in range(15)
    ]
    semantic = [SemanticCandidate(property_id=str(i), similarity=float(90 - i)) for i in range(0, 15, 3)]
    intent = _intent(price_max=1500, required_features=("ascensor",))

    first = fuse(semantic, structured, intent)
    second = fuse(semantic, structured, intent)

    scores = [r.score for r in first]
    assert scores == sorted(scores, reverse=True)
    assert [r.property.id for r in first] == [r.property.id for r in second]
    assert [r.score for r in first] == [r.score for r in second]


def test_tie_break_by_price_then_position():
    structured = [
        _match("a", price=None),
        _match("b", price=1200),
        _match("c", price=900),
        _match("d", price=900),
    ]

    ranking = fuse([], structured, _intent())

    assert [r.property.id for r in ranking] == ["c", "d", "b", "a"]


def test_custom_weights():
    weights = FusionWeights(semantic=1.0, semantic_miss_penalty=0.0)
    structured = [_match("1"), _match("2")]

    ranking = fuse([SemanticCandidate(property_id="2", similarity=40.0)], structured, _intent(), weights)

    assert ranking[0].property.id == "2"
    assert ranking[0].score == pytest.approx(40)
    assert ranking[1].score == 0


def test_empty_structured_gives_empty_ranking():
    assert fuse([SemanticCandidate(property_id="1", similarity=99.0)], [], _intent()) == []
