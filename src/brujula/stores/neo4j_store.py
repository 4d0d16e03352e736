"""
Store estructurado sobre Neo4j.

Modelo del grafo (poblado por el pipeline de ingesta):
    (:Inmueble {id, precio, habitaciones, metros, tipo_vivienda, url,
                planta, luminosidad, exterior_interior, reforma, orientacion})
    (:Inmueble)-[:TIENE]->(:Caracteristica {nombre})
    (:Inmueble)-[:UBICADO_EN]->(:Zona {nombre})
"""

from typing import Any, Optional

import structlog
from neo4j import AsyncDriver, AsyncGraphDatabase, RoutingControl

from brujula.config import Settings, get_settings
from brujula.models import PropertyQuery
from brujula.stores.base import PropertyStore

logger = structlog.get_logger()


_RETURN_CLAUSE = """
OPTIONAL MATCH (i)-[:UBICADO_EN]->(z:Zona)
OPTIONAL MATCH (i)-[:TIENE]->(c:Caracteristica)
WITH i,
     head(collect(DISTINCT z.nombre)) AS zone,
     collect(DISTINCT c.nombre) AS features
WITH i, zone, features,
     CASE WHEN $candidate_ids IS NOT NULL AND toString(i.id) IN $candidate_ids
          THEN $structural_bonus
          ELSE 0
     END AS structural_bonus
RETURN toString(i.id) AS id,
       i.precio AS price,
       i.habitaciones AS rooms,
       i.metros AS area,
       i.tipo_vivienda AS property_type,
       i.url AS url,
       i.planta AS floor,
       i.luminosidad AS luminosity,
       i.exterior_interior AS exposure,
       i.orientacion AS orientation,
       i.reforma AS renovation_state,
       zone,
       features,
       structural_bonus
ORDER BY structural_bonus DESC, price ASC
"""


def build_cypher(query: PropertyQuery) -> tuple[str, dict[str, Any]]:
    """
    Compila un PropertyQuery a Cypher parametrizado.

    Todos los valores viajan como parámetros. Las cotas en 0 se respetan
    (0 es una cota válida, no "sin filtro").

    Returns:
        (cypher, params)
    """
    conditions: list[str] = []
    params: dict[str, Any] = {
        "candidate_ids": list(query.candidate_ids) if query.candidate_ids else None,
        "structural_bonus": query.structural_bonus,
    }
    if query.limit is not None:
        params["limit"] = int(query.limit)

    # Precio
    if query.price_max is not None:
        conditions.append("i.precio <= $price_max")
        params["price_max"] = query.price_max
    if query.price_min is not None:
        conditions.append("i.precio >= $price_min")
        params["price_min"] = query.price_min

    # Habitaciones
    if query.rooms_min is not None:
        conditions.append("i.habitaciones >= $rooms_min")
        params["rooms_min"] = query.rooms_min
    if query.rooms_max is not None:
        conditions.append("i.habitaciones <= $rooms_max")
        params["rooms_max"] = query.rooms_max

    # Metros
    if query.area_min is not None:
        conditions.append("i.metros >= $area_min")
        params["area_min"] = query.area_min

    # Tipo de vivienda
    if query.property_type is not None:
        conditions.append("toLower(i.tipo_vivienda) = toLower($property_type)")
        params["property_type"] = query.property_type

    # Características obligatorias: una relación TIENE por cada una
    for idx, feature in enumerate(query.required_features):
        key = f"feature_{idx}"
        conditions.append(
            f"EXISTS {{ MATCH (i)-[:TIENE]->(:Caracteristica {{nombre: ${key}}}) }}"
        )
        params[key] = feature

    # Zonas: igualdad o substring, sin distinguir mayúsculas
    if query.preferred_zones:
        conditions.append(
            "EXISTS { MATCH (i)-[:UBICADO_EN]->(zf:Zona) "
            "WHERE ANY(zp IN $zones WHERE toLower(zf.nombre) CONTAINS zp "
            "OR toLower(zf.nombre) = zp) }"
        )
        params["zones"] = [z.lower() for z in query.preferred_zones]

    cypher = "MATCH (i:Inmueble)"
    if conditions:
        cypher += "\nWHERE " + "\n  AND ".join(conditions)
    cypher += "\n" + _RETURN_CLAUSE.strip()
    if query.limit is not None:
        cypher += "\nLIMIT $limit"

    return cypher, params


class Neo4jPropertyStore(PropertyStore):
    """Adaptador de lectura sobre un driver async de Neo4j (pool propio del driver)."""

    name = "neo4j"

    def __init__(self, driver: AsyncDriver, database: Optional[str] = None):
        self._driver = driver
        self._database = database

    @classmethod
    async def connect(cls, settings: Optional[Settings] = None) -> "Neo4jPropertyStore":
        """
        Abre el driver una sola vez y verifica conectividad.

        Raises:
            neo4j.exceptions.ServiceUnavailable: Si el servidor no responde
        """
        settings = settings or get_settings()
        driver = AsyncGraphDatabase.driver(
            settings.neo4j_uri,
            auth=(settings.neo4j_user, settings.neo4j_password),
        )
        try:
            await driver.verify_connectivity()
        except Exception as e:
            await driver.close()
            logger.error(
                "Error conectando a Neo4j",
                uri=settings.neo4j_uri,
                error=str(e),
            )
            raise

        logger.info("Neo4j conectado", uri=settings.neo4j_uri, database=settings.neo4j_database)
        return cls(driver, settings.neo4j_database)

    async def find_properties(self, query: PropertyQuery) -> list[dict]:
        cypher, params = build_cypher(query)
        records, _, _ = await self._driver.execute_query(
            cypher,
            params,
            database_=self._database,
            routing_=RoutingControl.READ,
        )
        return [record.data() for record in records]

    async def close(self) -> None:
        await self._driver.close()
