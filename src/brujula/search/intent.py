"""
Validación de la intención que devuelve el extractor (LLM).

Convierte el payload crudo en un Intent inmutable:
- Descarta cotas negativas o precios implausibles (confusión de unidades)
- Separa características conocidas de las que no existen en el store
- Garantiza una descripción semántica no vacía
"""

import json
from typing import Optional, Union

import structlog
from pydantic import ValidationError

from brujula.config import Settings, get_settings
from brujula.exceptions import IntentParseError
from brujula.models import Intent, RawIntent
from brujula.normalization import normalize_feature

logger = structlog.get_logger()

Payload = Union[dict, str, bytes]

_NUMERIC_FIELDS = ("price_max", "price_min", "rooms_min", "rooms_max", "area_min")


def decode_payload(payload: Payload) -> dict:
    """
    Decodifica el payload del LLM a un dict.

    Tolera el bloque ```json ... ``` con el que suelen responder los modelos.

    Raises:
        IntentParseError: Si no es JSON o no es un objeto
    """
    if isinstance(payload, dict):
        return payload

    if isinstance(payload, bytes):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise IntentParseError(f"Payload no es UTF-8: {e}") from e

    if not isinstance(payload, str):
        raise IntentParseError(f"Tipo de payload no soportado: {type(payload).__name__}")

    text = payload.strip()
    if text.startswith("```"):
        parts = text.split("```")
        if len(parts) >= 2:
            text = parts[1].strip()
            if text.startswith("json"):
                text = text[4:].strip()

    if not text:
        raise IntentParseError("Payload vacío")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise IntentParseError(f"Payload no es JSON válido: {e}") from e

    if not isinstance(data, dict):
        raise IntentParseError(f"Se esperaba un objeto JSON, llegó {type(data).__name__}")

    return data


def discard_implausible_price(value: Optional[float], threshold: float) -> Optional[float]:
    """
    Regla de política: un precio por debajo del umbral se asume mal
    interpretado por el LLM (ej: "1,5" por "1.500") y se descarta.
    """
    if value is None:
        return None
    if value < threshold:
        return None
    return value


def split_features(
    names: list[str], vocabulary: list[str]
) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """
    Separa nombres de características en (conocidas, desconocidas).

    Las conocidas se devuelven normalizadas; las desconocidas conservan
    el texto original para la rama semántica.
    """
    known: list[str] = []
    unknown: list[str] = []
    vocab = set(vocabulary)

    for raw in names:
        if not isinstance(raw, str):
            continue
        name = normalize_feature(raw)
        if not name:
            continue
        if name in vocab:
            if name not in known:
                known.append(name)
        elif raw.strip() not in unknown:
            unknown.append(raw.strip())

    return tuple(known), tuple(unknown)


def _unique(values: list[str]) -> tuple[str, ...]:
    result: list[str] = []
    for value in values:
        if not isinstance(value, str):
            continue
        cleaned = value.strip()
        if cleaned and cleaned.lower() not in (r.lower() for r in result):
            result.append(cleaned)
    return tuple(result)


def parse_intent(payload: Payload, settings: Optional[Settings] = None) -> Intent:
    """
    Valida el payload del extractor y construye un Intent.

    Args:
        payload: dict ya decodificado, o JSON como str/bytes
        settings: Configuración (default: get_settings())

    Returns:
        Intent validado

    Raises:
        IntentParseError: Si el payload no es un objeto estructurado válido
    """
    settings = settings or get_settings()
    data = decode_payload(payload)

    try:
        raw = RawIntent.model_validate(data)
    except ValidationError as e:
        raise IntentParseError(f"Intención con tipos inválidos: {e.error_count()} errores") from e

    numeric: dict[str, Optional[float]] = {}
    for name in _NUMERIC_FIELDS:
        value = getattr(raw, name)
        if value is not None and value < 0:
            logger.warning("Cota negativa descartada", field=name, value=value)
            value = None
        numeric[name] = value

    for name in ("price_max", "price_min"):
        original = numeric[name]
        numeric[name] = discard_implausible_price(original, settings.min_plausible_price)
        if original is not None and numeric[name] is None:
            logger.warning(
                "Precio implausible descartado",
                field=name,
                value=original,
                threshold=settings.min_plausible_price,
            )

    vocabulary = settings.feature_vocabulary
    required, unknown_required = split_features(raw.required_features, vocabulary)
    desired, unknown_desired = split_features(raw.desired_features, vocabulary)
    unmatched = _unique(list(unknown_required) + list(unknown_desired))

    if unmatched:
        logger.info(
            "Características fuera del vocabulario",
            unmatched=list(unmatched),
        )

    description = (raw.semantic_description or "").strip() or settings.semantic_placeholder

    try:
        intent = Intent(
            **numeric,
            property_type=raw.property_type.strip() if raw.property_type else None,
            required_features=required,
            desired_features=tuple(f for f in desired if f not in required),
            preferred_zones=_unique(raw.preferred_zones),
            unmatched_features=unmatched,
            semantic_description=description,
        )
    except ValidationError as e:
        raise IntentParseError(f"Intención inválida: {e.error_count()} errores") from e

    logger.debug(
        "Intención validada",
        price_max=intent.price_max,
        rooms_min=intent.rooms_min,
        required_features=list(intent.required_features),
        preferred_zones=list(intent.preferred_zones),
    )
    return intent
