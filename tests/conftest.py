"""
Fakes en memoria para los puertos del motor (sin red).

El store fake evalúa PropertyQuery con la misma semántica que el Cypher
compilado, así los tests del pipeline ejercitan los predicados reales.
"""

import asyncio
from typing import Optional

import pytest

from brujula.analysis import BaseLLMProvider, LLMResponse
from brujula.config import Settings
from brujula.context import SearchContext
from brujula.models import Property, PropertyQuery, VectorHit, presort_key
from brujula.stores import Embedder, PropertyStore, VectorIndex


def make_row(id, price=None, rooms=None, area=None, features=(), zone=None, **extra) -> dict:
    """Fila tal como la devuelve el store estructurado."""
    row = {
        "id": str(id),
        "price": price,
        "rooms": rooms,
        "area": area,
        "property_type": extra.pop("property_type", "piso"),
        "url": f"https://example.com/inmueble/{id}",
        "zone": zone,
        "features": list(features),
    }
    row.update(extra)
    return row


class FakePropertyStore(PropertyStore):
    name = "fake_store"

    def __init__(self, rows: list[dict], honor_predicates: bool = True):
        self.rows = rows
        self.honor_predicates = honor_predicates
        self.queries: list[PropertyQuery] = []
        self.closed = False

    async def find_properties(self, query: PropertyQuery) -> list[dict]:
        self.queries.append(query)
        result = []
        for row in self.rows:
            if self.honor_predicates and not query.matches(Property.model_validate(row)):
                continue
            result.append({**row, "structural_bonus": query.bonus_for(row.get("id"))})
        result.sort(key=lambda r: presort_key(r["structural_bonus"], r["price"]))
        return result[: query.limit]

    async def close(self) -> None:
        self.closed = True


class FailingPropertyStore(PropertyStore):
    name = "fake_store"

    def __init__(self, error: Optional[Exception] = None, delay: float = 0.0):
        self.error = error or ConnectionError("neo4j caído")
        self.delay = delay
        self.queries: list[PropertyQuery] = []

    async def find_properties(self, query: PropertyQuery) -> list[dict]:
        self.queries.append(query)
        if self.delay:
            await asyncio.sleep(self.delay)
        raise self.error


class FakeVectorIndex(VectorIndex):
    name = "fake_index"

    def __init__(self, hits: Optional[list[VectorHit]] = None, error: Optional[Exception] = None):
        self.hits = hits or []
        self.error = error
        self.calls: list[int] = []
        self.closed = False

    async def query(self, embedding: list[float], limit: int) -> list[VectorHit]:
        self.calls.append(limit)
        if self.error:
            raise self.error
        return self.hits[:limit]

    async def close(self) -> None:
        self.closed = True


class FakeEmbedder(Embedder):
    name = "fake_embedder"

    def __init__(self, error: Optional[Exception] = None, delay: float = 0.0):
        self.error = error
        self.delay = delay
        self.texts: list[str] = []

    async def embed_query(self, text: str) -> list[float]:
        self.texts.append(text)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return [0.1, 0.2, 0.3]


class FakeLLMProvider(BaseLLMProvider):
    provider_name = "fake_llm"

    def __init__(self, text: str = "", error: Optional[Exception] = None):
        self.text = text
        self.error = error
        self.calls: list[dict] = []

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.2,
        max_tokens: int = 1024,
        json_output: bool = False,
    ) -> LLMResponse:
        self.calls.append({"system_prompt": system_prompt, "user_prompt": user_prompt, "json_output": json_output})
        if self.error:
            raise self.error
        return LLMResponse(text=self.text, model="fake", provider=self.provider_name)


def hits(*pairs) -> list[VectorHit]:
    """hits(("5", 0.1), ("7", 0.3)) -> VectorHit con distancia coseno."""
    return [VectorHit(id=str(id), distance=distance) for id, distance in pairs]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        gemini_api_key=None,
        groq_api_key=None,
        generate_explanation=False,
        parallel_retrieval=False,
        embedding_timeout_s=0.5,
        vector_timeout_s=0.5,
        store_timeout_s=0.5,
        llm_timeout_s=0.5,
    )


@pytest.fixture
def make_context(settings):
    def _make(
        store: Optional[PropertyStore] = None,
        index: Optional[VectorIndex] = None,
        embedder: Optional[Embedder] = None,
        settings_override: Optional[Settings] = None,
        **kwargs,
    ) -> SearchContext:
        return SearchContext(
            settings=settings_override or settings,
            property_store=store or FakePropertyStore([]),
            vector_index=index or FakeVectorIndex(),
            embedder=embedder or FakeEmbedder(),
            **kwargs,
        )

    return _make
