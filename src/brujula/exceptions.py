"""
Errores del pipeline de búsqueda híbrida.

Cada etapa convierte las fallas de sus dependencias externas en uno
de estos tipos; el pipeline decide si degradar o cortar la consulta.
"""

from typing import Optional


class BrujulaError(Exception):
    """Error base del sistema."""

    stage: str = "unknown"

    def __init__(self, message: str, *, dependency: Optional[str] = None):
        super().__init__(message)
        self.dependency = dependency


class IntentParseError(BrujulaError):
    """El payload del LLM no es un objeto estructurado válido. Fatal para la consulta."""

    stage = "intent"


class RetrievalUnavailable(BrujulaError):
    """Falló el embedding o el índice vectorial. No fatal: se degrada a solo estructurado."""

    stage = "semantic"


class FilterUnavailable(BrujulaError):
    """Falló el store estructurado. La consulta termina sin resultados: las restricciones no se pueden aproximar."""

    stage = "structured"
