"""
Pesos y umbrales del motor de matching.

Tabla estática de importancia por criterio (suma 100), bandas de
calidad del score global y tablas de compatibilidad de dominio.
"""

from types import MappingProxyType
from typing import Mapping, Optional

import structlog

from propmatch.config import ENERGY_CLASSES

logger = structlog.get_logger()


# Pesos por criterio. Primarios: budget, location, transaction_type,
# property_type. Secundarios: bedrooms, size, amenities. El resto desempata.
CRITERION_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {
        "budget": 25,
        "location": 20,
        "transaction_type": 15,
        "property_type": 8,
        "bedrooms": 8,
        "size": 7,
        "amenities": 5,
        "condition": 2,
        "furnished": 1,
        "floor": 2,
        "elevator": 1,
        "pet_friendly": 1,
        "heating": 1,
        "energy_class": 1,
        "parking": 3,
    }
)

CRITERIA: tuple[str, ...] = tuple(CRITERION_WEIGHTS)

EXPECTED_WEIGHT_TOTAL = 100.0
WEIGHT_TOLERANCE = 1e-6

# Bandas de calidad del score global
MATCH_THRESHOLDS: Mapping[str, float] = MappingProxyType(
    {
        "excellent": 85,
        "good": 70,
        "fair": 50,
        "poor": 25,
    }
)

# Política común de scores
NO_PREFERENCE_SCORE = 80
UNKNOWN_SCORE = 50
FULL_SCORE = 100
MATCHED_SCORE = 80

# Presupuesto: 0 al 30% por encima del máximo, piso de 70 al 50% por debajo
BUDGET_MAX_OVER_PERCENT = 30
BUDGET_UNDER_PENALTY_PERCENT = 50
BUDGET_MIN_UNDER_SCORE = 70

# Ubicación
LOCATION_EXACT_MATCH = 100
LOCATION_PARTIAL_MATCH = 75

# Tipo de operación / tipo de propiedad
GENERIC_TYPE_SCORE = 50

# Dormitorios
BEDROOMS_SCORE_PER_UNIT = 25

# Superficie
SIZE_MAX_DEVIATION_PERCENT = 40

# Amenities
AMENITIES_REQUIRED_WEIGHT = 70
AMENITIES_PREFERRED_WEIGHT = 30

# Piso
FLOOR_SCORE_PER_LEVEL = 15

# Amoblado
FURNISHED_PARTIAL_SCORE = 60

# Calefacción fuera de las preferidas
HEATING_NOT_PREFERRED_SCORE = 30

# Tablas de compatibilidad
INTENT_TO_TRANSACTION: Mapping[str, frozenset[str]] = MappingProxyType(
    {
        "BUY": frozenset({"SALE"}),
        "SELL": frozenset({"SALE"}),
        "INVEST": frozenset({"SALE"}),
        "RENT": frozenset({"RENTAL", "SHORT_TERM"}),
        "LEASE": frozenset({"RENTAL", "SHORT_TERM"}),
    }
)

PURPOSE_TO_PROPERTY_TYPE: Mapping[str, frozenset[str]] = MappingProxyType(
    {
        "RESIDENTIAL": frozenset(
            {"RESIDENTIAL", "APARTMENT", "HOUSE", "MAISONETTE", "RENTAL", "VACATION"}
        ),
        "COMMERCIAL": frozenset({"COMMERCIAL", "WAREHOUSE", "INDUSTRIAL"}),
        "LAND": frozenset({"LAND", "PLOT", "FARM"}),
        "PARKING": frozenset({"PARKING"}),
        "OTHER": frozenset(),
    }
)

# Ranking energético: mayor es mejor (A_PLUS 10 ... IN_PROGRESS 1)
ENERGY_CLASS_RANK: Mapping[str, int] = MappingProxyType(
    {energy: len(ENERGY_CLASSES) - i for i, energy in enumerate(ENERGY_CLASSES)}
)


def get_weight(criterion: str) -> float:
    """Peso configurado para un criterio (0 si no existe)."""
    return CRITERION_WEIGHTS.get(criterion, 0)


def meets_energy_requirement(property_class: Optional[str], min_class: Optional[str]) -> bool:
    """
    Indica si la clase de la propiedad alcanza la mínima requerida.

    Ambas clases deben venir normalizadas. Una clase desconocida
    nunca cumple el requisito.
    """
    property_rank = ENERGY_CLASS_RANK.get(property_class or "")
    required_rank = ENERGY_CLASS_RANK.get(min_class or "")
    if property_rank is None or required_rank is None:
        return False
    return property_rank >= required_rank


def validate_weights(weights: Mapping[str, float] = CRITERION_WEIGHTS) -> bool:
    """
    Valida que los pesos sumen 100.

    No lanza excepciones: un desvío se registra como warning y el motor
    sigue operando con los pesos configurados, por lo que el score
    global puede salir del rango 0-100.

    Returns:
        True si la suma es 100 (con tolerancia)
    """
    total = sum(weights.values())
    if abs(total - EXPECTED_WEIGHT_TOTAL) > WEIGHT_TOLERANCE:
        logger.warning(
            "Los pesos de matching no suman 100",
            total=total,
            expected=EXPECTED_WEIGHT_TOTAL,
        )
        return False

    missing = [c for c in CRITERIA if c not in weights]
    if missing:
        logger.warning("Criterios sin peso configurado", missing=missing)
        return False

    return True


# Validación al cargar el módulo
validate_weights()
