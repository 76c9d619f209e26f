"""
Scorers por criterio.

Cada scorer es una función pura (preferencias, propiedad) -> CriterionScore
que sigue la misma política:

1. Sin preferencia del cliente -> score neutro (no el máximo)
2. Sin dato en la propiedad -> 50 (desconocido, distinto de un mismatch)
3. Caso contrario -> score graduado según la distancia al ideal
"""

from dataclasses import dataclass
from typing import Callable, Optional

from propmatch.matching import weights as w
from propmatch.matching.normalizers import (
    MatchPreferences,
    NumericRange,
    extract_property_amenities,
    get_property_locations,
    get_property_size_sqm,
    normalize_code,
    normalize_condition,
    normalize_energy_class,
    normalize_furnished,
    normalize_heating,
    parse_floor,
    to_number,
)
from propmatch.models import PropertyForMatching


@dataclass(frozen=True)
class CriterionScore:
    """Resultado de un criterio individual."""

    criterion: str
    weight: float
    score: float  # 0 a 100
    weighted_score: float  # score * weight / 100
    matched: bool
    reason: str

    def to_dict(self) -> dict:
        return {
            "criterion": self.criterion,
            "weight": self.weight,
            "score": self.score,
            "weighted_score": self.weighted_score,
            "matched": self.matched,
            "reason": self.reason,
        }


def create_score(
    criterion: str,
    score: float,
    reason: str,
    matched: bool = False,
) -> CriterionScore:
    """
    Construye un CriterionScore acotando el score a [0, 100].

    Un criterio cuenta como matcheado si el scorer lo indica o si
    el score alcanza 80.
    """
    weight = w.get_weight(criterion)
    bounded = min(float(w.FULL_SCORE), max(0.0, float(score)))
    return CriterionScore(
        criterion=criterion,
        weight=weight,
        score=round(bounded, 2),
        weighted_score=round(bounded * weight / 100, 2),
        matched=matched or bounded >= w.MATCHED_SCORE,
        reason=reason,
    )


def _distance_outside(value: float, bounds: NumericRange) -> tuple[float, Optional[float]]:
    """
    Distancia de value a la cota más cercana del rango y esa cota.
    Devuelve (0, None) si value está dentro.
    """
    if bounds.min is not None and value < bounds.min:
        return bounds.min - value, bounds.min
    if bounds.max is not None and value > bounds.max:
        return value - bounds.max, bounds.max
    return 0.0, None


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


# ============================================
# CRITERIOS PRIMARIOS
# ============================================


def score_budget(prefs: MatchPreferences, property: PropertyForMatching) -> CriterionScore:
    """
    Presupuesto.

    100 dentro del rango. Por encima del máximo decae linealmente
    hasta 0 al 30%. Por debajo del mínimo decae hasta un piso de 70
    al 50%: ser más barato es una penalización leve.
    """
    criterion = "budget"
    budget = prefs.budget

    if budget.is_open:
        return create_score(criterion, w.NO_PREFERENCE_SCORE, "No budget constraints")

    price = to_number(property.price)
    if price is None:
        return create_score(criterion, w.UNKNOWN_SCORE, "Property has no price listed")

    if budget.contains(price):
        return create_score(criterion, w.FULL_SCORE, "Price within budget", True)

    if budget.max is not None and price > budget.max:
        if budget.max <= 0:
            return create_score(criterion, 0, "Over budget")
        over_percent = (price - budget.max) / budget.max * 100
        reason = f"{round(over_percent)}% over budget"
        if over_percent >= w.BUDGET_MAX_OVER_PERCENT:
            return create_score(criterion, 0, reason)
        score = w.FULL_SCORE - (over_percent / w.BUDGET_MAX_OVER_PERCENT) * w.FULL_SCORE
        return create_score(criterion, score, reason)

    # Por debajo del mínimo
    if budget.min is None or budget.min <= 0:
        return create_score(criterion, w.UNKNOWN_SCORE, "Budget calculation error")
    under_percent = (budget.min - price) / budget.min * 100
    reason = f"{round(under_percent)}% under budget"
    if under_percent >= w.BUDGET_UNDER_PENALTY_PERCENT:
        return create_score(criterion, w.BUDGET_MIN_UNDER_SCORE, reason)
    score = w.FULL_SCORE - (under_percent / w.BUDGET_UNDER_PENALTY_PERCENT) * (
        w.FULL_SCORE - w.BUDGET_MIN_UNDER_SCORE
    )
    return create_score(criterion, score, reason)


def score_location(prefs: MatchPreferences, property: PropertyForMatching) -> CriterionScore:
    """Zonas de interés contra área/ciudad/municipio/provincia."""
    criterion = "location"

    if not prefs.areas:
        return create_score(criterion, w.NO_PREFERENCE_SCORE, "No location preference")

    locations = get_property_locations(property)
    if not locations:
        return create_score(criterion, w.UNKNOWN_SCORE, "Property has no location data")

    for area in prefs.areas:
        if area in locations:
            return create_score(
                criterion, w.LOCATION_EXACT_MATCH, f"Exact match: {area}", True
            )

    for area in prefs.areas:
        for location in locations:
            if area in location or location in area:
                return create_score(
                    criterion, w.LOCATION_PARTIAL_MATCH, f"Partial match: {location}"
                )

    return create_score(criterion, 0, "Location not in areas of interest")


def _score_compatibility(
    criterion: str,
    client_value: Optional[str],
    property_value: Optional[str],
    table,
) -> CriterionScore:
    if not client_value or not property_value:
        return create_score(
            criterion,
            w.NO_PREFERENCE_SCORE,
            f"{criterion.replace('_', ' ').capitalize()} not specified",
        )

    if property_value in table.get(client_value, frozenset()):
        return create_score(
            criterion, w.FULL_SCORE, f"{property_value} matches {client_value}", True
        )

    if client_value == "OTHER" or property_value == "OTHER":
        return create_score(criterion, w.GENERIC_TYPE_SCORE, "Generic category")

    return create_score(criterion, 0, f"{property_value} incompatible with {client_value}")


def score_transaction_type(
    prefs: MatchPreferences, property: PropertyForMatching
) -> CriterionScore:
    """Intención del cliente (BUY, RENT...) contra tipo de operación."""
    transaction_type = normalize_code(property.transaction_type)
    return _score_compatibility(
        "transaction_type", prefs.intent, transaction_type, w.INTENT_TO_TRANSACTION
    )


def score_property_type(
    prefs: MatchPreferences, property: PropertyForMatching
) -> CriterionScore:
    """Propósito del cliente (RESIDENTIAL...) contra tipo de propiedad."""
    property_type = normalize_code(property.property_type)
    return _score_compatibility(
        "property_type", prefs.purpose, property_type, w.PURPOSE_TO_PROPERTY_TYPE
    )


# ============================================
# CRITERIOS SECUNDARIOS
# ============================================


def score_bedrooms(prefs: MatchPreferences, property: PropertyForMatching) -> CriterionScore:
    """25 puntos menos por cada dormitorio fuera del rango."""
    criterion = "bedrooms"

    if prefs.bedrooms.is_open:
        return create_score(criterion, w.NO_PREFERENCE_SCORE, "No bedroom preference")

    bedrooms = to_number(property.bedrooms)
    if bedrooms is None:
        return create_score(criterion, w.UNKNOWN_SCORE, "Bedroom count unknown")

    if prefs.bedrooms.contains(bedrooms):
        return create_score(
            criterion, w.FULL_SCORE, f"{_fmt(bedrooms)} bedrooms within range", True
        )

    diff, _ = _distance_outside(bedrooms, prefs.bedrooms)
    score = w.FULL_SCORE - diff * w.BEDROOMS_SCORE_PER_UNIT
    return create_score(
        criterion, score, f"{_fmt(bedrooms)} bedrooms ({_fmt(diff)} off preference)"
    )


def score_size(prefs: MatchPreferences, property: PropertyForMatching) -> CriterionScore:
    """Decae linealmente hasta 0 al 40% de desvío respecto de la cota más cercana."""
    criterion = "size"

    if prefs.size.is_open:
        return create_score(criterion, w.NO_PREFERENCE_SCORE, "No size preference")

    size = get_property_size_sqm(property)
    if size is None:
        return create_score(criterion, w.UNKNOWN_SCORE, "Size unknown")

    if prefs.size.contains(size):
        return create_score(criterion, w.FULL_SCORE, f"{_fmt(size)} sqm within range", True)

    diff, bound = _distance_outside(size, prefs.size)
    if not bound or bound <= 0:
        return create_score(criterion, 0, f"{_fmt(size)} sqm outside size range")

    deviation = diff / bound * 100
    if deviation >= w.SIZE_MAX_DEVIATION_PERCENT:
        return create_score(criterion, 0, f"{round(deviation)}% outside size range")

    score = w.FULL_SCORE - (deviation / w.SIZE_MAX_DEVIATION_PERCENT) * w.FULL_SCORE
    return create_score(criterion, score, f"{_fmt(size)} sqm ({round(deviation)}% off)")


def score_amenities(prefs: MatchPreferences, property: PropertyForMatching) -> CriterionScore:
    """
    Amenities requeridas y deseables.

    Si falta alguna requerida, el score queda en (cumplidas/total) * 70.
    Con todas las requeridas se suma (deseables cumplidas/total) * 30,
    o nada si el cliente no indicó deseables.
    Sin requeridas, el score es el ratio de deseables.
    """
    criterion = "amenities"
    required = prefs.amenities.required
    preferred = prefs.amenities.preferred

    if prefs.amenities.is_empty:
        return create_score(criterion, w.NO_PREFERENCE_SCORE, "No amenity preferences")

    available = extract_property_amenities(property.amenities) or frozenset()

    required_met = len(required & available)
    preferred_met = len(preferred & available)

    if required and required_met < len(required):
        score = required_met / len(required) * w.AMENITIES_REQUIRED_WEIGHT
        return create_score(
            criterion, score, f"Missing {len(required) - required_met} required amenities"
        )

    if not required:
        score = preferred_met / len(preferred) * w.FULL_SCORE
        return create_score(
            criterion, score, f"{preferred_met}/{len(preferred)} preferred amenities"
        )

    preferred_score = (
        preferred_met / len(preferred) * w.AMENITIES_PREFERRED_WEIGHT if preferred else 0
    )
    return create_score(
        criterion,
        w.AMENITIES_REQUIRED_WEIGHT + preferred_score,
        f"All required met, {preferred_met}/{len(preferred)} preferred",
        True,
    )


# ============================================
# CRITERIOS TERCIARIOS
# ============================================


def score_condition(prefs: MatchPreferences, property: PropertyForMatching) -> CriterionScore:
    criterion = "condition"

    if not prefs.conditions:
        return create_score(criterion, w.NO_PREFERENCE_SCORE, "No condition preference")

    condition = normalize_condition(property.condition)
    if condition is None:
        return create_score(criterion, w.UNKNOWN_SCORE, "Property condition unknown")

    if condition in prefs.conditions:
        return create_score(criterion, w.FULL_SCORE, f"Condition: {condition}", True)

    return create_score(criterion, 0, f"Condition {condition} not preferred")


def score_furnished(prefs: MatchPreferences, property: PropertyForMatching) -> CriterionScore:
    """Exacto 100; FULLY contra PARTIALLY (o al revés) 60; resto 0."""
    criterion = "furnished"
    wanted = prefs.furnished

    if wanted is None:
        return create_score(criterion, w.NO_PREFERENCE_SCORE, "No furnished preference")

    status = normalize_furnished(property.furnished)
    if status is None:
        return create_score(criterion, w.UNKNOWN_SCORE, "Furnished status unknown")

    if status == wanted:
        return create_score(criterion, w.FULL_SCORE, f"Furnished: {status}", True)

    if {status, wanted} == {"FULLY", "PARTIALLY"}:
        return create_score(
            criterion, w.FURNISHED_PARTIAL_SCORE, f"Furnished: {status} (wanted {wanted})"
        )

    return create_score(criterion, 0, f"Furnished: {status} (wanted {wanted})")


def score_floor(prefs: MatchPreferences, property: PropertyForMatching) -> CriterionScore:
    """Planta baja excluyente, o rango con 15 puntos menos por piso de desvío."""
    criterion = "floor"
    floors = prefs.floor

    if floors.is_open:
        return create_score(criterion, w.NO_PREFERENCE_SCORE, "No floor preference")

    floor = parse_floor(property.floor)
    if floor is None:
        return create_score(criterion, w.UNKNOWN_SCORE, "Floor level unknown")

    if floors.ground_only:
        if floor == 0:
            return create_score(criterion, w.FULL_SCORE, "Ground floor", True)
        return create_score(criterion, 0, f"Floor {floor} (need ground)")

    if floors.contains(floor):
        return create_score(criterion, w.FULL_SCORE, f"Floor {floor} within range", True)

    diff, _ = _distance_outside(floor, floors)
    score = w.FULL_SCORE - diff * w.FLOOR_SCORE_PER_LEVEL
    return create_score(criterion, score, f"Floor {floor} ({_fmt(diff)} floors off)")


def _score_requirement(
    criterion: str,
    required: bool,
    available: Optional[bool],
    labels: tuple[str, str, str, str],
) -> CriterionScore:
    no_requirement, unknown, satisfied, missing = labels
    if not required:
        return create_score(criterion, w.NO_PREFERENCE_SCORE, no_requirement)
    if available is None:
        return create_score(criterion, w.UNKNOWN_SCORE, unknown)
    if available:
        return create_score(criterion, w.FULL_SCORE, satisfied, True)
    return create_score(criterion, 0, missing)


def score_elevator(prefs: MatchPreferences, property: PropertyForMatching) -> CriterionScore:
    return _score_requirement(
        "elevator",
        prefs.requires_elevator,
        property.elevator,
        (
            "No elevator requirement",
            "Elevator status unknown",
            "Has elevator",
            "No elevator (required)",
        ),
    )


def score_pet_friendly(
    prefs: MatchPreferences, property: PropertyForMatching
) -> CriterionScore:
    return _score_requirement(
        "pet_friendly",
        prefs.requires_pet_friendly,
        property.accepts_pets,
        (
            "No pet requirement",
            "Pet policy unknown",
            "Pet-friendly",
            "Not pet-friendly (required)",
        ),
    )


def score_heating(prefs: MatchPreferences, property: PropertyForMatching) -> CriterionScore:
    criterion = "heating"

    if not prefs.heating:
        return create_score(criterion, w.NO_PREFERENCE_SCORE, "No heating preference")

    heating = normalize_heating(property.heating_type)
    if heating is None:
        return create_score(criterion, w.UNKNOWN_SCORE, "Heating type unknown")

    if heating in prefs.heating:
        return create_score(criterion, w.FULL_SCORE, f"Heating: {heating}", True)

    return create_score(
        criterion, w.HEATING_NOT_PREFERRED_SCORE, f"Heating: {heating} (not preferred)"
    )


def score_energy_class(
    prefs: MatchPreferences, property: PropertyForMatching
) -> CriterionScore:
    """Comparación ordinal: A+ es la mejor, H / en trámite la peor."""
    criterion = "energy_class"
    minimum = prefs.energy_class_min

    if minimum is None:
        return create_score(criterion, w.NO_PREFERENCE_SCORE, "No energy class requirement")

    energy_class = normalize_energy_class(property.energy_cert_class)
    if energy_class is None:
        return create_score(criterion, w.UNKNOWN_SCORE, "Energy class unknown")

    if w.meets_energy_requirement(energy_class, minimum):
        return create_score(criterion, w.FULL_SCORE, f"Energy class: {energy_class}", True)

    return create_score(criterion, 0, f"Energy class {energy_class} below {minimum}")


def _has_parking(property: PropertyForMatching) -> Optional[bool]:
    """True/False si la propiedad informa cochera, None si no hay datos."""
    if property.parking_spaces is not None and property.parking_spaces > 0:
        return True

    amenities = extract_property_amenities(property.amenities)
    if amenities is not None and "parking" in amenities:
        return True

    if property.parking_spaces == 0 or amenities is not None:
        return False
    return None


def score_parking(prefs: MatchPreferences, property: PropertyForMatching) -> CriterionScore:
    criterion = "parking"

    if not prefs.requires_parking:
        return create_score(criterion, w.NO_PREFERENCE_SCORE, "No parking requirement")

    if normalize_code(property.property_type) == "PARKING":
        return create_score(criterion, w.FULL_SCORE, "Is a parking space", True)

    return _score_requirement(
        criterion,
        True,
        _has_parking(property),
        ("", "Parking availability unknown", "Has parking", "No parking (required)"),
    )


Scorer = Callable[[MatchPreferences, PropertyForMatching], CriterionScore]

# Orden fijo del breakdown
SCORERS: tuple[Scorer, ...] = (
    score_budget,
    score_location,
    score_transaction_type,
    score_property_type,
    score_bedrooms,
    score_size,
    score_amenities,
    score_condition,
    score_furnished,
    score_floor,
    score_elevator,
    score_pet_friendly,
    score_heating,
    score_energy_class,
    score_parking,
)
