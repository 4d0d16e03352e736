from brujula.models import Intent, Property, SemanticCandidate, StructuredMatch
from brujula.search.assembler import assemble
from brujula.search.fusion import fuse


def _ranking():
    structured = [
        StructuredMatch(
            property=Property(
                id=str(i),
                price=1000 + i * 100,
                rooms=2,
                area=70,
                zone="Chamberí",
                features=["ascensor"],
                url=f"https://example.com/{i}",
                luminosity="luminoso",
            ),
            structural_bonus=100 if i == 4 else 0,
        )
        for i in range(1, 8)
    ]
    semantic = [SemanticCandidate(property_id="4", similarity=80.0)]
    return fuse(semantic, structured, Intent(price_max=2000, semantic_description="luminoso"))


def test_assemble_truncates_in_order():
    ranking = _ranking()

    items = assemble(ranking, limit=5)

    assert len(items) == 5
    assert [item.id for item in items] == [r.property.id for r in ranking[:5]]
    assert items[0].id == "4"


def test_assemble_copies_fields_and_score():
    ranking = _ranking()

    item = assemble(ranking, limit=1)[0]
    prop = ranking[0].property

    assert item.price == prop.price
    assert item.zone == "Chamberí"
    assert item.features == ["ascensor"]
    assert item.url == prop.url
    assert item.luminosity == "luminoso"
    assert item.score == ranking[0].score
    assert item.breakdown["total"] == ranking[0].score
    assert item.breakdown["semantic_hit"] is True
    assert item.breakdown["matched_tags"] == ("luminoso",)


def test_assemble_limit_larger_than_ranking():
    ranking = _ranking()

    assert len(assemble(ranking, limit=50)) == len(ranking)


def test_assemble_empty():
    assert assemble([], limit=5) == []
