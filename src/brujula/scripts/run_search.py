"""
Script para ejecutar una búsqueda híbrida desde la terminal.

Extrae la intención con el LLM (o la lee de un archivo JSON), corre
ambas ramas de recuperación y muestra el SearchResponse en JSON.

Uso:
    python -m brujula.scripts.run_search "piso luminoso en Chamberí con terraza"
    python -m brujula.scripts.run_search "piso reformado" --intent-file intent.json --limit 10
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import structlog

from brujula.config import get_settings
from brujula.context import create_context
from brujula.models import SearchResponse, SearchStatus
from brujula.search import HybridSearchEngine

# Configurar logging
settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(message)s",
    stream=sys.stderr,
    force=True,
)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Búsqueda híbrida de inmuebles")
    parser.add_argument("query", help="Consulta en lenguaje natural")
    parser.add_argument(
        "--intent-file",
        type=Path,
        help="JSON con la intención ya extraída (saltea el LLM extractor)",
    )
    parser.add_argument("--limit", type=int, help="Cantidad de resultados a presentar")
    parser.add_argument(
        "--parallel",
        action="store_true",
        help="Ejecutar rama semántica y estructurada en paralelo",
    )
    parser.add_argument(
        "--no-explain",
        action="store_true",
        help="No generar la explicación en lenguaje natural",
    )
    return parser.parse_args(argv)


async def run_search(args: argparse.Namespace) -> SearchResponse:
    """Ejecuta una búsqueda con los overrides de la línea de comandos."""
    overrides = {}
    if args.limit is not None:
        overrides["presentation_limit"] = args.limit
    if args.parallel:
        overrides["parallel_retrieval"] = True
    if args.no_explain:
        overrides["generate_explanation"] = False

    run_settings = settings.model_copy(update=overrides)
    needs_llm = args.intent_file is None or run_settings.generate_explanation

    context = await create_context(run_settings, with_llm=needs_llm)
    try:
        engine = HybridSearchEngine(context)
        if args.intent_file is not None:
            payload = args.intent_file.read_text(encoding="utf-8")
            return await engine.search(payload, query_text=args.query)
        return await engine.search_text(args.query)
    finally:
        await context.aclose()


def main():
    """Entry point del script."""
    args = parse_args()
    if args.limit is not None and args.limit < 1:
        logger.error("--limit debe ser mayor a 0", limit=args.limit)
        sys.exit(2)

    logger.info("Iniciando búsqueda...", query=args.query)

    try:
        response = asyncio.run(run_search(args))

        print(response.model_dump_json(indent=2))
        logger.info(
            "Búsqueda finalizada",
            status=response.status.value,
            total=response.total,
        )

        sys.exit(1 if response.status == SearchStatus.FAILED else 0)

    except KeyboardInterrupt:
        logger.info("Búsqueda interrumpida por usuario")
        sys.exit(130)
    except Exception as e:
        logger.error("Error fatal en búsqueda", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
