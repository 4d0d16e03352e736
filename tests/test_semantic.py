import pytest

from brujula.exceptions import RetrievalUnavailable
from brujula.search.semantic import SemanticRetriever, distance_to_similarity, to_candidates

from conftest import FakeEmbedder, FakeVectorIndex, hits


def test_distance_to_similarity():
    assert distance_to_similarity(0.0) == 100
    assert distance_to_similarity(0.25) == pytest.approx(75)
    assert distance_to_similarity(1.0) == 0
    assert distance_to_similarity(1.7) == 0
    assert distance_to_similarity(-0.1) == 100


def test_to_candidates_orders_and_truncates():
    candidates = to_candidates(hits(("a", 0.4), ("b", 0.1), ("c", 0.2)), limit=2)

    assert [c.property_id for c in candidates] == ["b", "c"]
    assert candidates[0].similarity == pytest.approx(90)


def test_to_candidates_keeps_best_similarity_per_id():
    candidates = to_candidates(hits(("a", 0.5), ("a", 0.2), ("b", 0.3)), limit=10)

    assert [(c.property_id, round(c.similarity)) for c in candidates] == [("a", 80), ("b", 70)]


def test_to_candidates_stable_on_ties():
    candidates = to_candidates(hits(("x", 0.3), ("y", 0.3), ("z", 0.3)), limit=10)

    assert [c.property_id for c in candidates] == ["x", "y", "z"]


@pytest.mark.asyncio
async def test_retrieve_uses_semantic_query_and_limit(make_context):
    embedder = FakeEmbedder()
    index = FakeVectorIndex(hits(("1", 0.1), ("2", 0.2), ("3", 0.3)))
    retriever = SemanticRetriever(make_context(index=index, embedder=embedder))

    candidates = await retriever.retrieve("piso luminoso", limit=2)

    assert embedder.texts == ["piso luminoso"]
    assert index.calls == [2]
    assert [c.property_id for c in candidates] == ["1", "2"]


@pytest.mark.asyncio
async def test_blank_query_uses_placeholder(make_context, settings):
    embedder = FakeEmbedder()
    retriever = SemanticRetriever(make_context(embedder=embedder))

    await retriever.retrieve("   ")

    assert embedder.texts == [settings.semantic_placeholder]


@pytest.mark.asyncio
async def test_zero_limit_skips_dependencies(make_context):
    embedder = FakeEmbedder()
    retriever = SemanticRetriever(make_context(embedder=embedder))

    assert await retriever.retrieve("algo", limit=0) == []
    assert embedder.texts == []


@pytest.mark.asyncio
async def test_embedding_failure_degrades_to_empty(make_context):
    retriever = SemanticRetriever(make_context(embedder=FakeEmbedder(error=RuntimeError("quota"))))

    assert await retriever.retrieve("algo") == []


@pytest.mark.asyncio
async def test_index_failure_degrades_to_empty(make_context):
    retriever = SemanticRetriever(make_context(index=FakeVectorIndex(error=ConnectionError("chroma"))))

    assert await retriever.retrieve("algo") == []


@pytest.mark.asyncio
async def test_embedding_timeout_degrades_to_empty(make_context, settings):
    context = make_context(
        embedder=FakeEmbedder(delay=1.0),
        settings_override=settings.model_copy(update={"embedding_timeout_s": 0.05}),
    )

    assert await SemanticRetriever(context).retrieve("algo") == []


@pytest.mark.asyncio
async def test_retrieve_or_raise_reports_dependency(make_context):
    retriever = SemanticRetriever(make_context(index=FakeVectorIndex(error=ConnectionError("chroma"))))

    with pytest.raises(RetrievalUnavailable) as exc_info:
        await retriever.retrieve_or_raise("algo")

    assert exc_info.value.stage == "semantic"
    assert exc_info.value.dependency == "fake_index"
