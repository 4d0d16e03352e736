"""
Intención de búsqueda.

RawIntent refleja el JSON tal como lo devuelve el LLM (ya decodificado);
Intent es el valor validado e inmutable que consume el resto del pipeline.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _alias(name: str, spanish: str) -> AliasChoices:
    return AliasChoices(name, spanish)


class RawIntent(BaseModel):
    """
    Payload del extractor de intención.

    Acepta los nombres de campo en inglés y las claves en español que usa
    el prompt de extracción. Campos desconocidos se ignoran y los ausentes
    quedan en None (nunca en 0: 0 es una cota válida).
    """

    # NaN e infinito no son cotas: el JSON del LLM puede traerlos
    model_config = ConfigDict(extra="ignore", populate_by_name=True, allow_inf_nan=False)

    price_max: Optional[float] = Field(None, validation_alias=_alias("price_max", "precio_maximo"))
    price_min: Optional[float] = Field(None, validation_alias=_alias("price_min", "precio_minimo"))
    rooms_min: Optional[float] = Field(
        None, validation_alias=_alias("rooms_min", "habitaciones_minimas")
    )
    rooms_max: Optional[float] = Field(
        None, validation_alias=_alias("rooms_max", "habitaciones_maximas")
    )
    area_min: Optional[float] = Field(None, validation_alias=_alias("area_min", "metros_minimos"))
    property_type: Optional[str] = Field(
        None, validation_alias=_alias("property_type", "tipo_vivienda")
    )
    required_features: list[str] = Field(
        default_factory=list,
        validation_alias=_alias("required_features", "caracteristicas_obligatorias"),
    )
    desired_features: list[str] = Field(
        default_factory=list,
        validation_alias=_alias("desired_features", "caracteristicas_deseadas"),
    )
    preferred_zones: list[str] = Field(
        default_factory=list,
        validation_alias=_alias("preferred_zones", "zonas_preferidas"),
    )
    semantic_description: Optional[str] = Field(
        None, validation_alias=_alias("semantic_description", "descripcion_semantica")
    )

    @field_validator(
        "required_features", "desired_features", "preferred_zones", mode="before"
    )
    @classmethod
    def _coerce_list(cls, value):
        # El LLM a veces devuelve un string suelto o null en vez de un array
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("property_type", "semantic_description", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class Intent(BaseModel):
    """
    Representación validada de la consulta del usuario.

    Invariantes:
    - Toda cota numérica presente es no negativa.
    - required_features y desired_features están dentro del vocabulario.
    - semantic_description nunca es None.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    price_max: Optional[float] = Field(None, ge=0)
    price_min: Optional[float] = Field(None, ge=0)
    rooms_min: Optional[float] = Field(None, ge=0)
    rooms_max: Optional[float] = Field(None, ge=0)
    area_min: Optional[float] = Field(None, ge=0)
    property_type: Optional[str] = None

    required_features: tuple[str, ...] = ()
    desired_features: tuple[str, ...] = ()
    preferred_zones: tuple[str, ...] = ()

    # Términos fuera del vocabulario: no filtran, pero informan la búsqueda semántica
    unmatched_features: tuple[str, ...] = ()

    semantic_description: str = Field(..., min_length=1)

    @property
    def semantic_query(self) -> str:
        """Texto que se envía al servicio de embeddings."""
        if not self.unmatched_features:
            return self.semantic_description
        return f"{self.semantic_description}. {', '.join(self.unmatched_features)}"

    @property
    def has_constraints(self) -> bool:
        """True si la intención define al menos un predicado obligatorio."""
        return any(
            value is not None
            for value in (
                self.price_max,
                self.price_min,
                self.rooms_min,
                self.rooms_max,
                self.area_min,
                self.property_type,
            )
        ) or bool(self.required_features or self.preferred_zones)
