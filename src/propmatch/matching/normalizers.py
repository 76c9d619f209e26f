"""
Normalización de datos para matching.

Convierte los campos heterogéneos y opcionales de clientes y
propiedades en formas canónicas comparables: rangos numéricos,
conjuntos de tokens y valores de enumeraciones.

Todas las funciones son totales: ante datos inválidos devuelven
None o colecciones vacías, nunca lanzan excepciones.
"""

import json
import math
import re
import unicodedata
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from propmatch.config import (
    ENERGY_CLASSES,
    FURNISHED_STATUSES,
    HEATING_TYPES,
    PROPERTY_CONDITIONS,
)
from propmatch.models import ClientForMatching, ClientPropertyPreferences, PropertyForMatching

SQFT_TO_SQM = 0.092903

PENTHOUSE_FLOOR = 99

_THOUSANDS_NUMBER = re.compile(r"^-?\d{1,3}(?:,\d{3})+(?:\.\d+)?$")


@dataclass(frozen=True)
class NumericRange:
    """Rango con cotas independientes y opcionales."""

    min: Optional[float] = None
    max: Optional[float] = None

    @property
    def is_open(self) -> bool:
        """True si no hay ninguna cota (sin preferencia)."""
        return self.min is None and self.max is None

    def contains(self, value: float) -> bool:
        return (self.min is None or value >= self.min) and (
            self.max is None or value <= self.max
        )


@dataclass(frozen=True)
class FloorRange(NumericRange):
    """Rango de pisos con el flag de planta baja como tri-estado."""

    ground_only: Optional[bool] = None

    @property
    def is_open(self) -> bool:
        return super().is_open and not self.ground_only


@dataclass(frozen=True)
class AmenityPreferences:
    required: frozenset[str] = frozenset()
    preferred: frozenset[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not self.required and not self.preferred


@dataclass(frozen=True)
class MatchPreferences:
    """
    Todas las preferencias del cliente relevantes para el matching,
    ya normalizadas.
    """

    intent: Optional[str] = None
    purpose: Optional[str] = None
    budget: NumericRange = field(default_factory=NumericRange)
    areas: tuple[str, ...] = ()
    bedrooms: NumericRange = field(default_factory=NumericRange)
    bathrooms: NumericRange = field(default_factory=NumericRange)
    size: NumericRange = field(default_factory=NumericRange)
    floor: FloorRange = field(default_factory=FloorRange)
    amenities: AmenityPreferences = field(default_factory=AmenityPreferences)
    conditions: frozenset[str] = frozenset()
    furnished: Optional[str] = None
    heating: frozenset[str] = frozenset()
    energy_class_min: Optional[str] = None
    requires_elevator: bool = False
    requires_pet_friendly: bool = False
    requires_parking: bool = False


# ============================================
# NÚMEROS
# ============================================


def to_number(value: Any) -> Optional[float]:
    """
    Convierte int, float, Decimal o string numérico a float.

    En strings la coma solo se acepta como separador de miles
    ("250,000"); una coma decimal ("1,5") es ambigua y devuelve None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, Decimal):
        try:
            number = float(value)
        except (InvalidOperation, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if "," in text:
            if not _THOUSANDS_NUMBER.match(text):
                return None
            text = text.replace(",", "")
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


_FLOOR_ALIASES: dict[str, int] = {
    "ground": 0,
    "ground floor": 0,
    "g": 0,
    "pb": 0,
    "planta baja": 0,
    "ισογειο": 0,
    "basement": -1,
    "subsuelo": -1,
    "υπογειο": -1,
    "mezzanine": 1,
    "entrepiso": 1,
    "ημιωροφος": 1,
    "penthouse": PENTHOUSE_FLOOR,
    "ρετιρε": PENTHOUSE_FLOOR,
}

_FLOOR_NUMBER = re.compile(r"^(-?\d+)(?:\.0+)?\s*(?:st|nd|rd|th|º|°|o)?(?:\s*floor)?$")


def _strip_accents(text: str) -> str:
    normalized = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in normalized if not unicodedata.combining(ch))


def parse_floor(floor: Any) -> Optional[int]:
    """
    Parsea el piso a entero con signo.

    Acepta números ("3", "-1", "2nd", "3º"), nombres comunes
    ("Ground", "PB", "Basement", "Penthouse") y sus equivalentes en
    griego. Devuelve None si no se puede interpretar.
    """
    if floor is None or isinstance(floor, bool):
        return None
    if isinstance(floor, int):
        return floor
    if isinstance(floor, float):
        return int(floor) if math.isfinite(floor) and floor.is_integer() else None
    if not isinstance(floor, str):
        return None

    normalized = re.sub(r"\s+", " ", _strip_accents(floor).lower()).strip()
    if not normalized:
        return None

    if normalized in _FLOOR_ALIASES:
        return _FLOOR_ALIASES[normalized]

    match = _FLOOR_NUMBER.match(normalized)
    if match:
        return int(match.group(1))
    return None


# ============================================
# PREFERENCIAS
# ============================================


def _range(min_value: Any, max_value: Any) -> NumericRange:
    return NumericRange(min=to_number(min_value), max=to_number(max_value))


def get_budget_range(client: ClientForMatching) -> NumericRange:
    return _range(client.budget_min, client.budget_max)


def get_bedroom_range(prefs: ClientPropertyPreferences) -> NumericRange:
    return _range(prefs.bedrooms_min, prefs.bedrooms_max)


def get_bathroom_range(prefs: ClientPropertyPreferences) -> NumericRange:
    return _range(prefs.bathrooms_min, prefs.bathrooms_max)


def get_size_range(prefs: ClientPropertyPreferences) -> NumericRange:
    return _range(prefs.size_min_sqm, prefs.size_max_sqm)


def get_floor_range(prefs: ClientPropertyPreferences) -> FloorRange:
    return FloorRange(
        min=to_number(prefs.floor_min),
        max=to_number(prefs.floor_max),
        ground_only=prefs.ground_floor_only,
    )


def _normalize_enum_list(values, normalizer) -> frozenset[str]:
    result = set()
    for value in values or []:
        normalized = normalizer(value)
        if normalized:
            result.add(normalized)
    return frozenset(result)


def normalize_code(value: Any) -> Optional[str]:
    """Código canónico: mayúsculas y guiones bajos ("short term" -> "SHORT_TERM")."""
    if not value or not isinstance(value, str):
        return None
    code = re.sub(r"[\s-]+", "_", value.strip().upper())
    return code or None


def extract_preferences(client: ClientForMatching) -> MatchPreferences:
    """
    Reúne todas las preferencias del cliente en una sola estructura.

    Cualquier campo puede estar ausente; en ese caso queda con su
    valor neutro (rango abierto, conjunto vacío, None o False).
    """
    prefs = client.property_preferences or ClientPropertyPreferences()

    furnished = normalize_furnished_preference(prefs.furnished_preference)

    return MatchPreferences(
        intent=normalize_code(client.intent),
        purpose=normalize_code(client.purpose),
        budget=get_budget_range(client),
        areas=tuple(parse_areas_of_interest(client.areas_of_interest)),
        bedrooms=get_bedroom_range(prefs),
        bathrooms=get_bathroom_range(prefs),
        size=get_size_range(prefs),
        floor=get_floor_range(prefs),
        amenities=parse_amenity_preferences(
            prefs.amenities_required, prefs.amenities_preferred
        ),
        conditions=_normalize_enum_list(prefs.condition_preferences, normalize_condition),
        furnished=furnished,
        heating=_normalize_enum_list(prefs.heating_preferences, normalize_heating),
        energy_class_min=normalize_energy_class(prefs.energy_class_min),
        requires_elevator=bool(prefs.requires_elevator),
        requires_pet_friendly=bool(prefs.requires_pet_friendly),
        requires_parking=bool(prefs.requires_parking),
    )


# ============================================
# UBICACIÓN
# ============================================

_LOCATION_PREFIX = re.compile(r"^(city of|municipality of|δημος|νομος)\s*")
_LOCATION_SUFFIX = re.compile(r"\s*(city|municipality|δημος)$")


def normalize_location(location: Any) -> str:
    """Minúsculas, sin acentos y sin prefijos tipo 'city of'."""
    if not location or not isinstance(location, str):
        return ""
    text = _strip_accents(location).lower().strip()
    text = re.sub(r"\s+", " ", text)
    text = _LOCATION_PREFIX.sub("", text)
    text = _LOCATION_SUFFIX.sub("", text)
    return text.strip()


def _unique(tokens) -> list[str]:
    seen: list[str] = []
    for token in tokens:
        if token and token not in seen:
            seen.append(token)
    return seen


def get_property_locations(property: PropertyForMatching) -> list[str]:
    """Identificadores de ubicación de la propiedad, sin duplicados."""
    return _unique(
        normalize_location(value)
        for value in (
            property.area,
            property.address_city,
            property.municipality,
            property.address_state,
        )
    )


def parse_areas_of_interest(areas: Any) -> list[str]:
    """
    Parsea las zonas de interés del cliente.

    Acepta una lista, un string con un array JSON o un string
    separado por comas.
    """
    if not areas:
        return []

    if isinstance(areas, (list, tuple, set, frozenset)):
        return _unique(normalize_location(a) for a in areas)

    if isinstance(areas, str):
        try:
            parsed = json.loads(areas)
        except json.JSONDecodeError:
            return _unique(normalize_location(a) for a in areas.split(","))
        if isinstance(parsed, list):
            return _unique(normalize_location(a) for a in parsed)
        if isinstance(parsed, str):
            return _unique([normalize_location(parsed)])

    return []


# ============================================
# AMENITIES
# ============================================

STANDARD_AMENITIES = (
    "pool",
    "gym",
    "garden",
    "terrace",
    "balcony",
    "storage",
    "security",
    "concierge",
    "playground",
    "bbq",
    "sauna",
    "jacuzzi",
    "fireplace",
    "air_conditioning",
    "solar_panels",
    "ev_charging",
    "smart_home",
    "alarm",
    "cctv",
    "intercom",
    "parking",
    "elevator",
)

# Sinónimos -> clave canónica
AMENITY_SYNONYMS: dict[str, str] = {
    "swimming_pool": "pool",
    "pileta": "pool",
    "piscina": "pool",
    "gimnasio": "gym",
    "fitness": "gym",
    "jardin": "garden",
    "yard": "garden",
    "terraza": "terrace",
    "rooftop": "terrace",
    "balcon": "balcony",
    "storage_room": "storage",
    "baulera": "storage",
    "parrilla": "bbq",
    "barbecue": "bbq",
    "grill": "bbq",
    "ac": "air_conditioning",
    "a_c": "air_conditioning",
    "aircon": "air_conditioning",
    "aire_acondicionado": "air_conditioning",
    "garage": "parking",
    "garaje": "parking",
    "parking_space": "parking",
    "parking_spot": "parking",
    "cochera": "parking",
    "ascensor": "elevator",
    "lift": "elevator",
    "seguridad": "security",
    "vigilancia": "security",
    "doorman": "concierge",
    "porteria": "concierge",
    "solar": "solar_panels",
    "ev_charger": "ev_charging",
}


def normalize_amenity_key(key: Any) -> str:
    """Normaliza una amenity a su clave canónica snake_case."""
    if not key or not isinstance(key, str):
        return ""
    text = _strip_accents(key).lower().strip()
    text = re.sub(r"[\s\-/]+", "_", text)
    text = re.sub(r"[^a-z0-9_]", "", text).strip("_")
    return AMENITY_SYNONYMS.get(text, text)


def extract_property_amenities(amenities: Any) -> Optional[frozenset[str]]:
    """
    Extrae las amenities de la propiedad como conjunto de claves.

    Formatos: {"pool": true, "gym": false}, ["pool", "gym"], un string
    JSON de cualquiera de los dos, o un string separado por comas.

    Returns:
        None si la propiedad no informa amenities (dato desconocido)
    """
    if amenities is None:
        return None

    if isinstance(amenities, str):
        text = amenities.strip()
        if not text:
            return None
        try:
            amenities = json.loads(text)
        except json.JSONDecodeError:
            amenities = text.split(",")

    if isinstance(amenities, dict):
        keys = (k for k, v in amenities.items() if v is True)
    elif isinstance(amenities, (list, tuple, set, frozenset)):
        keys = (a for a in amenities if isinstance(a, str))
    else:
        return None

    return frozenset(k for k in (normalize_amenity_key(key) for key in keys) if k)


def parse_amenity_preferences(required, preferred) -> AmenityPreferences:
    """Separa las amenities del cliente en requeridas y deseables."""
    required_set = frozenset(
        k for k in (normalize_amenity_key(a) for a in required or []) if k
    )
    preferred_set = frozenset(
        k for k in (normalize_amenity_key(a) for a in preferred or []) if k
    )
    # Una amenity requerida no cuenta además como deseable
    return AmenityPreferences(required=required_set, preferred=preferred_set - required_set)


# ============================================
# SUPERFICIE
# ============================================


def get_property_size_sqm(property: PropertyForMatching) -> Optional[float]:
    """
    Superficie en m².

    Orden: size_net_sqm, size_gross_sqm, square_feet convertido.
    Valores no positivos cuentan como ausentes.
    """
    for candidate in (property.size_net_sqm, property.size_gross_sqm):
        size = to_number(candidate)
        if size is not None and size > 0:
            return size

    square_feet = to_number(property.square_feet)
    if square_feet is not None and square_feet > 0:
        return float(round(square_feet * SQFT_TO_SQM))

    return None


# ============================================
# PRESUPUESTO
# ============================================


def is_price_in_budget(
    price: Optional[float],
    budget_min: Optional[float],
    budget_max: Optional[float],
    tolerance_percent: float = 0,
) -> bool:
    """Indica si el precio cae en el rango, con tolerancia porcentual."""
    if price is None:
        return False
    if budget_min is None and budget_max is None:
        return True

    tolerance = tolerance_percent / 100
    if budget_min is not None and price < budget_min * (1 - tolerance):
        return False
    if budget_max is not None and price > budget_max * (1 + tolerance):
        return False
    return True


# ============================================
# ENUMS
# ============================================

_FURNISHED_MAPPINGS: dict[str, str] = {
    **{status: status for status in FURNISHED_STATUSES},
    "FULL": "FULLY",
    "FURNISHED": "FULLY",
    "FULLY_FURNISHED": "FULLY",
    "YES": "FULLY",
    "AMOBLADO": "FULLY",
    "PARTIAL": "PARTIALLY",
    "PARTIALLY_FURNISHED": "PARTIALLY",
    "SEMI": "PARTIALLY",
    "SEMI_FURNISHED": "PARTIALLY",
    "NO": "UNFURNISHED",
    "NONE": "UNFURNISHED",
    "NOT_FURNISHED": "UNFURNISHED",
}

_HEATING_MAPPINGS: dict[str, str] = {
    **{heating: heating for heating in HEATING_TYPES},
    "INDIVIDUAL": "AUTONOMOUS",
    "COMMUNAL": "CENTRAL",
    "GAS": "NATURAL_GAS",
    "HEATPUMP": "HEAT_PUMP",
    "ELECTRICAL": "ELECTRIC",
    "NO": "NONE",
}

_CONDITION_MAPPINGS: dict[str, str] = {
    **{condition: condition for condition in PROPERTY_CONDITIONS},
    "NEW": "EXCELLENT",
    "VERYGOOD": "VERY_GOOD",
    "AVERAGE": "GOOD",
    "NEEDSRENOVATION": "NEEDS_RENOVATION",
    "RENOVATE": "NEEDS_RENOVATION",
    "FIXER": "NEEDS_RENOVATION",
}

_ENERGY_MAPPINGS: dict[str, str] = {
    **{energy: energy for energy in ENERGY_CLASSES},
    "APLUS": "A_PLUS",
    "INPROGRESS": "IN_PROGRESS",
    "PENDING": "IN_PROGRESS",
}


def normalize_furnished(value: Any) -> Optional[str]:
    """FULLY, PARTIALLY o UNFURNISHED; None si no se reconoce."""
    return _FURNISHED_MAPPINGS.get(normalize_code(value) or "")


def normalize_furnished_preference(value: Any) -> Optional[str]:
    """Como normalize_furnished, pero 'ANY' equivale a sin preferencia."""
    if normalize_code(value) == "ANY":
        return None
    return normalize_furnished(value)


def normalize_heating(value: Any) -> Optional[str]:
    return _HEATING_MAPPINGS.get(normalize_code(value) or "")


def normalize_condition(value: Any) -> Optional[str]:
    return _CONDITION_MAPPINGS.get(normalize_code(value) or "")


def normalize_energy_class(value: Any) -> Optional[str]:
    """Clase energética canónica ('A+' -> 'A_PLUS'); None si no se reconoce."""
    code = normalize_code(value)
    if not code:
        return None
    code = code.replace("+", "_PLUS").replace("__", "_")
    return _ENERGY_MAPPINGS.get(code)
