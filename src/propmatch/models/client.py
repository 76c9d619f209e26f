"""
Modelo de Cliente y Preferencias

Define los datos del cliente que consume el motor de matching:
intención, presupuesto, zonas de interés y preferencias estructuradas
sobre la propiedad buscada.
"""

from decimal import Decimal
from typing import Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _decimal_to_float(value):
    # Los Decimal del ORM llegan tal cual; strings vacíos equivalen a ausencia
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ClientPropertyPreferences(BaseModel):
    """
    Preferencias estructuradas del cliente sobre la propiedad.
    Todos los campos son opcionales: la ausencia nunca penaliza.
    """

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    # Ambientes
    bedrooms_min: Optional[int] = Field(None, ge=0, description="Mínimo de dormitorios")
    bedrooms_max: Optional[int] = Field(None, ge=0, description="Máximo de dormitorios")
    bathrooms_min: Optional[int] = Field(None, ge=0, description="Mínimo de baños")
    bathrooms_max: Optional[int] = Field(None, ge=0, description="Máximo de baños")

    # Superficie
    size_min_sqm: Optional[float] = Field(None, description="Superficie mínima m²")
    size_max_sqm: Optional[float] = Field(None, description="Superficie máxima m²")

    # Piso
    floor_min: Optional[int] = Field(None, description="Piso mínimo")
    floor_max: Optional[int] = Field(None, description="Piso máximo")
    ground_floor_only: Optional[bool] = Field(
        None, description="Solo planta baja (None = sin indicar)"
    )

    # Requisitos binarios
    requires_elevator: Optional[bool] = Field(None)
    requires_parking: Optional[bool] = Field(None)
    requires_pet_friendly: Optional[bool] = Field(None)

    # Preferencias blandas
    furnished_preference: Optional[str] = Field(
        None, description="FULLY, PARTIALLY, UNFURNISHED o ANY"
    )
    heating_preferences: list[str] = Field(default_factory=list)
    energy_class_min: Optional[str] = Field(None, description="Clase energética mínima")
    condition_preferences: list[str] = Field(default_factory=list)

    # Amenities
    amenities_required: list[str] = Field(
        default_factory=list, description="Amenities excluyentes"
    )
    amenities_preferred: list[str] = Field(
        default_factory=list, description="Amenities deseables"
    )

    @field_validator("size_min_sqm", "size_max_sqm", mode="before")
    @classmethod
    def _coerce_size(cls, value):
        return _decimal_to_float(value)

    @field_validator(
        "heating_preferences",
        "condition_preferences",
        "amenities_required",
        "amenities_preferred",
        mode="before",
    )
    @classmethod
    def _none_as_empty(cls, value):
        return [] if value is None else value


class ClientForMatching(BaseModel):
    """
    Cliente tal como lo entrega la fuente de registros.
    """

    model_config = ConfigDict(
        extra="ignore",
        from_attributes=True,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    # Identificadores
    id: str = Field(..., description="ID del cliente")
    client_name: str = Field("", description="Nombre corto")
    full_name: Optional[str] = Field(None, description="Nombre completo")

    # Intención
    intent: Optional[str] = Field(None, description="BUY, SELL, RENT, LEASE o INVEST")
    purpose: Optional[str] = Field(
        None, description="RESIDENTIAL, COMMERCIAL, LAND, PARKING u OTHER"
    )

    # Presupuesto
    budget_min: Optional[float] = Field(None, description="Presupuesto mínimo")
    budget_max: Optional[float] = Field(None, description="Presupuesto máximo")

    # Ubicación: lista, string JSON o string separado por comas
    areas_of_interest: Optional[Union[list[str], str]] = Field(
        None, description="Zonas de interés en texto libre"
    )

    property_preferences: Optional[ClientPropertyPreferences] = Field(
        None, description="Preferencias estructuradas"
    )

    # Metadatos
    client_status: Optional[str] = Field(None, description="LEAD, ACTIVE, INACTIVE...")
    assigned_to: Optional[str] = Field(None, description="Agente asignado")
    organization_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("organization_id", "organizationId"),
        description="Organización dueña del registro",
    )

    @field_validator("budget_min", "budget_max", mode="before")
    @classmethod
    def _coerce_budget(cls, value):
        return _decimal_to_float(value)
