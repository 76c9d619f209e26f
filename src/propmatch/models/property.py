"""
Modelo de Propiedad

Atributos de la propiedad que participan del matching.
Los campos se conservan con el formato de origen (piso como texto,
amenities como dict o lista); la normalización ocurre en el motor.
"""

from decimal import Decimal
from typing import Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class PropertyForMatching(BaseModel):
    """Propiedad tal como la entrega la fuente de registros."""

    model_config = ConfigDict(
        extra="ignore",
        from_attributes=True,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    # Identificadores
    id: str = Field(..., description="ID de la propiedad")
    property_name: str = Field("", description="Título de la propiedad")

    # Operación
    price: Optional[float] = Field(None, description="Precio publicado")
    property_type: Optional[str] = Field(None, description="APARTMENT, HOUSE, PARKING...")
    transaction_type: Optional[str] = Field(
        None, description="SALE, RENTAL, SHORT_TERM o EXCHANGE"
    )
    property_status: Optional[str] = Field(None, description="ACTIVE, PENDING, SOLD...")

    # Ubicación
    area: Optional[str] = Field(None, description="Barrio o zona")
    address_city: Optional[str] = Field(None, description="Ciudad")
    address_state: Optional[str] = Field(None, description="Provincia/Estado")
    municipality: Optional[str] = Field(None, description="Municipio")

    # Ambientes
    bedrooms: Optional[int] = Field(None, ge=0, description="Dormitorios")
    bathrooms: Optional[int] = Field(None, ge=0, description="Baños")

    # Superficie: neta preferida, bruta como alternativa, pies² como último recurso
    size_net_sqm: Optional[float] = Field(None, description="Superficie neta m²")
    size_gross_sqm: Optional[float] = Field(None, description="Superficie bruta m²")
    square_feet: Optional[float] = Field(None, description="Superficie en pies²")

    # Características
    floor: Optional[str] = Field(None, description="Piso como texto: 'Ground', '3', '-1'")
    elevator: Optional[bool] = Field(None)
    accepts_pets: Optional[bool] = Field(None)
    furnished: Optional[str] = Field(None, description="FULLY, PARTIALLY o UNFURNISHED")
    heating_type: Optional[str] = Field(None)
    energy_cert_class: Optional[str] = Field(None, description="A+ a H, o IN_PROGRESS")
    condition: Optional[str] = Field(None)
    parking_spaces: Optional[int] = Field(None, ge=0, description="Cantidad de cocheras")

    # Amenities: {"pool": true}, ["pool", "gym"] o texto
    amenities: Optional[Union[dict[str, bool], list[str], str]] = Field(None)

    # Metadatos
    assigned_to: Optional[str] = Field(None, description="Agente asignado")
    organization_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("organization_id", "organizationId"),
        description="Organización dueña del registro",
    )

    @field_validator("price", "size_net_sqm", "size_gross_sqm", "square_feet", mode="before")
    @classmethod
    def _coerce_decimal(cls, value):
        if isinstance(value, Decimal):
            return float(value)
        if isinstance(value, str) and not value.strip():
            return None
        return value
