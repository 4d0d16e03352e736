import pytest

from brujula.models import PropertyQuery
from brujula.stores import ChromaVectorIndex, Neo4jPropertyStore


class FakeCollection:
    def __init__(self, results):
        self.results = results
        self.kwargs = None

    async def query(self, **kwargs):
        self.kwargs = kwargs
        return self.results


class FakeRecord:
    def __init__(self, data):
        self._data = data

    def data(self):
        return self._data


class FakeDriver:
    def __init__(self, rows):
        self.rows = rows
        self.calls = []
        self.closed = False

    async def execute_query(self, cypher, params, **kwargs):
        self.calls.append((cypher, params, kwargs))
        return [FakeRecord(row) for row in self.rows], None, None

    async def close(self):
        self.closed = True


@pytest.mark.asyncio
async def test_chroma_query_maps_parallel_arrays():
    collection = FakeCollection(
        {
            "ids": [["5", "7"]],
            "distances": [[0.1, 0.35]],
            "metadatas": [[{"zona": "Retiro"}, None]],
        }
    )
    index = ChromaVectorIndex(collection)

    hits = await index.query([0.1, 0.2], limit=2)

    assert collection.kwargs["n_results"] == 2
    assert "where" not in collection.kwargs
    assert [(h.id, h.distance) for h in hits] == [("5", 0.1), ("7", 0.35)]
    assert hits[0].metadata == {"zona": "Retiro"}
    assert hits[1].metadata == {}


@pytest.mark.asyncio
async def test_chroma_query_empty_result():
    index = ChromaVectorIndex(FakeCollection({"ids": [[]], "distances": [[]], "metadatas": None}))

    assert await index.query([0.1], limit=5) == []


@pytest.mark.asyncio
async def test_neo4j_store_runs_compiled_query():
    driver = FakeDriver([{"id": "1", "price": 1000, "features": ["ascensor"], "structural_bonus": 0}])
    store = Neo4jPropertyStore(driver, database="idealista")

    rows = await store.find_properties(PropertyQuery(price_max=1500, required_features=("ascensor",)))

    assert rows[0]["id"] == "1"
    cypher, params, kwargs = driver.calls[0]
    assert "MATCH (i:Inmueble)" in cypher
    assert params["price_max"] == 1500
    assert params["feature_0"] == "ascensor"
    assert kwargs["database_"] == "idealista"

    await store.close()
    assert driver.closed
