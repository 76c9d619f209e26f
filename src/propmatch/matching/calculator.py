"""
Calculadora de matching cliente-propiedad.

Ejecuta los 15 scorers para cada par, suma las contribuciones
ponderadas en un score global y expone consultas batch, top-N y
filtradas por umbral.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Iterator, Optional

import structlog

from propmatch.config import get_settings
from propmatch.matching.criteria import SCORERS, CriterionScore
from propmatch.matching.normalizers import extract_preferences
from propmatch.matching.weights import MATCH_THRESHOLDS
from propmatch.models import ClientForMatching, PropertyForMatching

logger = structlog.get_logger()


@dataclass(frozen=True)
class MatchResult:
    """Resultado de matching para un par cliente-propiedad."""

    client_id: str
    property_id: str
    overall_score: float  # 0 a 100
    breakdown: tuple[CriterionScore, ...]
    matched_criteria: int
    total_criteria: int
    # No participa de la igualdad: dos cálculos idénticos son iguales
    calculated_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), compare=False
    )

    @property
    def quality(self) -> str:
        return classify_match_quality(self.overall_score)

    def get_criterion(self, criterion: str) -> Optional[CriterionScore]:
        for score in self.breakdown:
            if score.criterion == criterion:
                return score
        return None

    def to_dict(self) -> dict:
        """Diccionario serializable a JSON."""
        return {
            "client_id": self.client_id,
            "property_id": self.property_id,
            "overall_score": self.overall_score,
            "quality": self.quality,
            "breakdown": [score.to_dict() for score in self.breakdown],
            "matched_criteria": self.matched_criteria,
            "total_criteria": self.total_criteria,
            "calculated_at": self.calculated_at.isoformat(),
        }


def classify_match_quality(score: float) -> str:
    """Banda de calidad: excellent, good, fair, poor o very_poor."""
    for band in ("excellent", "good", "fair", "poor"):
        if score >= MATCH_THRESHOLDS[band]:
            return band
    return "very_poor"


def calculate_match_score(
    client: ClientForMatching,
    property: PropertyForMatching,
) -> MatchResult:
    """
    Calcula el match entre un cliente y una propiedad.

    Las preferencias se normalizan una sola vez y se pasan a cada
    scorer. El score global es la suma de las contribuciones
    ponderadas, redondeada a 2 decimales.
    """
    prefs = extract_preferences(client)
    breakdown = tuple(scorer(prefs, property) for scorer in SCORERS)

    overall = sum(score.weighted_score for score in breakdown)

    return MatchResult(
        client_id=client.id,
        property_id=property.id,
        overall_score=round(overall, 2),
        breakdown=breakdown,
        matched_criteria=sum(1 for score in breakdown if score.matched),
        total_criteria=len(breakdown),
    )


def iter_batch_matches(
    clients: Iterable[ClientForMatching],
    properties: Iterable[PropertyForMatching],
) -> Iterator[MatchResult]:
    """
    Genera los matches del producto cartesiano de forma perezosa.

    Permite cortar la iteración antes de terminar sobre lotes grandes.
    """
    properties = list(properties)
    for client in clients:
        for property in properties:
            yield calculate_match_score(client, property)


def calculate_batch_matches(
    clients: Iterable[ClientForMatching],
    properties: Iterable[PropertyForMatching],
) -> list[MatchResult]:
    """Matches de todos los pares cliente-propiedad, sin poda."""
    results = list(iter_batch_matches(clients, properties))
    logger.debug("Batch de matching calculado", total=len(results))
    return results


def _rank(
    results: Iterable[MatchResult],
    min_score: float,
    limit: Optional[int],
    tie_breaker,
) -> list[MatchResult]:
    filtered = [r for r in results if r.overall_score >= min_score]
    # Empates: id ascendente del otro lado del par
    filtered.sort(key=lambda r: (-r.overall_score, tie_breaker(r)))
    if limit is None:
        return filtered
    return filtered[: max(limit, 0)]


def find_matching_properties(
    client: ClientForMatching,
    properties: Iterable[PropertyForMatching],
    min_score: float = 0,
    limit: Optional[int] = None,
) -> list[MatchResult]:
    """
    Mejores propiedades para un cliente.

    Args:
        client: Cliente a evaluar
        properties: Propiedades candidatas
        min_score: Score global mínimo (inclusive)
        limit: Máximo de resultados (None = todos)

    Returns:
        Lista de MatchResult ordenada por score descendente
    """
    return _rank(
        (calculate_match_score(client, p) for p in properties),
        min_score,
        limit,
        lambda r: r.property_id,
    )


def find_matching_clients(
    property: PropertyForMatching,
    clients: Iterable[ClientForMatching],
    min_score: float = 0,
    limit: Optional[int] = None,
) -> list[MatchResult]:
    """
    Mejores clientes para una propiedad.

    Mismo criterio de filtrado y orden que find_matching_properties.
    """
    return _rank(
        (calculate_match_score(c, property) for c in clients),
        min_score,
        limit,
        lambda r: r.client_id,
    )


def top_properties_for_client(
    client: ClientForMatching,
    properties: Iterable[PropertyForMatching],
) -> list[MatchResult]:
    """find_matching_properties con el score mínimo y límite configurados."""
    settings = get_settings()
    return find_matching_properties(
        client,
        properties,
        min_score=settings.default_min_match_score,
        limit=settings.default_match_limit,
    )


def top_clients_for_property(
    property: PropertyForMatching,
    clients: Iterable[ClientForMatching],
) -> list[MatchResult]:
    """find_matching_clients con el score mínimo y límite configurados."""
    settings = get_settings()
    return find_matching_clients(
        property,
        clients,
        min_score=settings.default_min_match_score,
        limit=settings.default_match_limit,
    )


def combine_match_scores(
    rule_based_score: float,
    semantic_score: Optional[float],
    weights: Optional[tuple[float, float]] = None,
) -> float:
    """
    Combina el score por reglas con un score semántico externo.

    Args:
        rule_based_score: Score global del motor (0-100)
        semantic_score: Score semántico (0-100) o None si no hay
        weights: (peso reglas, peso semántico); por defecto según settings

    Returns:
        Score combinado redondeado a entero
    """
    if semantic_score is None:
        return rule_based_score

    if weights is None:
        semantic_weight = get_settings().semantic_weight
        weights = (1 - semantic_weight, semantic_weight)

    rule_weight, semantic_weight = weights
    return round(rule_based_score * rule_weight + semantic_score * semantic_weight)
