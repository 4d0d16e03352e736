"""
Normalización de texto compartida por la validación de intención,
el compilador de queries y la fusión.
"""

import re
import unicodedata


def normalize_text(text: str) -> str:
    """Minúsculas, sin acentos y con espacios colapsados."""
    normalized = unicodedata.normalize("NFKD", text or "")
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii")
    return re.sub(r"\s+", " ", ascii_text).strip().lower()


def normalize_feature(name: str) -> str:
    """
    Lleva un nombre de característica a la forma en que está guardada
    en el store: "Aire acondicionado" -> "aire_acondicionado".
    """
    text = normalize_text(name)
    return re.sub(r"[\s\-]+", "_", text).strip("_")
