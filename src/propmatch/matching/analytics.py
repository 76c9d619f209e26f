"""
Analíticas de matching para el dashboard.

Agregados puros sobre un lote de MatchResult: distribución de scores,
clientes sin buenos matches y propiedades con más interés.
"""

from dataclasses import asdict, dataclass, field
from typing import Optional, Sequence

import structlog

from propmatch.matching.calculator import MatchResult, calculate_batch_matches
from propmatch.matching.weights import MATCH_THRESHOLDS
from propmatch.models import ClientForMatching, PropertyForMatching

logger = structlog.get_logger()

DEFAULT_TOP_MATCHES = 20
DEFAULT_SUMMARY_LIMIT = 10

# (etiqueta, mínimo, máximo) inclusive
DISTRIBUTION_BUCKETS: tuple[tuple[str, float, float], ...] = (
    ("0-25%", 0, 25),
    ("26-50%", 26, 50),
    ("51-70%", 51, 70),
    ("71-85%", 71, 85),
    ("86-100%", 86, 100),
)


@dataclass(frozen=True)
class DistributionBucket:
    range: str
    min: float
    max: float
    count: int


@dataclass(frozen=True)
class ClientSummary:
    id: str
    client_name: str
    full_name: Optional[str]
    intent: Optional[str]
    budget_min: Optional[float]
    budget_max: Optional[float]
    client_status: Optional[str]
    best_match_score: float


@dataclass(frozen=True)
class PropertyMatchStats:
    id: str
    property_name: str
    price: Optional[float]
    property_type: Optional[str]
    area: Optional[str]
    address_city: Optional[str]
    property_status: Optional[str]
    match_count: int
    average_match_score: int
    top_match_score: float


@dataclass
class MatchAnalytics:
    """Analíticas completas para el dashboard."""

    top_matches: list[MatchResult] = field(default_factory=list)
    match_distribution: list[DistributionBucket] = field(default_factory=list)
    unmatched_clients: list[ClientSummary] = field(default_factory=list)
    hot_properties: list[PropertyMatchStats] = field(default_factory=list)
    total_clients: int = 0
    total_properties: int = 0
    average_match_score: int = 0
    clients_with_matches: int = 0

    def to_dict(self) -> dict:
        """Diccionario serializable a JSON."""
        return {
            "top_matches": [m.to_dict() for m in self.top_matches],
            "match_distribution": [asdict(b) for b in self.match_distribution],
            "unmatched_clients": [asdict(c) for c in self.unmatched_clients],
            "hot_properties": [asdict(p) for p in self.hot_properties],
            "total_clients": self.total_clients,
            "total_properties": self.total_properties,
            "average_match_score": self.average_match_score,
            "clients_with_matches": self.clients_with_matches,
        }


def match_distribution(results: Sequence[MatchResult]) -> list[DistributionBucket]:
    """
    Cuenta los matches por rango de score.

    Los buckets son enteros inclusive (0-25, 26-50...); el score se
    redondea antes de ubicarlo.
    """
    buckets = []
    for label, low, high in DISTRIBUTION_BUCKETS:
        count = sum(1 for r in results if low <= round(r.overall_score) <= high)
        buckets.append(DistributionBucket(range=label, min=low, max=high, count=count))
    return buckets


def best_scores_by_client(results: Sequence[MatchResult]) -> dict[str, float]:
    """Mejor score global de cada cliente."""
    best: dict[str, float] = {}
    for result in results:
        if result.overall_score > best.get(result.client_id, 0):
            best[result.client_id] = result.overall_score
    return best


def unmatched_clients(
    clients: Sequence[ClientForMatching],
    results: Sequence[MatchResult],
    threshold: float = MATCH_THRESHOLDS["fair"],
    limit: int = DEFAULT_SUMMARY_LIMIT,
) -> list[ClientSummary]:
    """
    Clientes cuyo mejor match queda por debajo del umbral.

    Ordenados del peor al mejor, para priorizar a los que necesitan
    atención.
    """
    best = best_scores_by_client(results)
    summaries = [
        ClientSummary(
            id=client.id,
            client_name=client.client_name,
            full_name=client.full_name,
            intent=client.intent,
            budget_min=client.budget_min,
            budget_max=client.budget_max,
            client_status=client.client_status,
            best_match_score=best.get(client.id, 0),
        )
        for client in clients
        if best.get(client.id, 0) < threshold
    ]
    summaries.sort(key=lambda s: (s.best_match_score, s.id))
    return summaries[:limit]


def hot_properties(
    properties: Sequence[PropertyForMatching],
    results: Sequence[MatchResult],
    threshold: float = MATCH_THRESHOLDS["fair"],
    limit: int = DEFAULT_SUMMARY_LIMIT,
) -> list[PropertyMatchStats]:
    """Propiedades con más matches por encima del umbral."""
    stats: dict[str, dict] = {}
    for result in results:
        if result.overall_score < threshold:
            continue
        current = stats.setdefault(
            result.property_id, {"count": 0, "total": 0.0, "top": 0.0}
        )
        current["count"] += 1
        current["total"] += result.overall_score
        current["top"] = max(current["top"], result.overall_score)

    hot = []
    for property in properties:
        current = stats.get(property.id)
        if not current:
            continue
        hot.append(
            PropertyMatchStats(
                id=property.id,
                property_name=property.property_name,
                price=property.price,
                property_type=property.property_type,
                area=property.area,
                address_city=property.address_city,
                property_status=property.property_status,
                match_count=current["count"],
                average_match_score=round(current["total"] / current["count"]),
                top_match_score=current["top"],
            )
        )

    hot.sort(key=lambda p: (-p.match_count, p.id))
    return hot[:limit]


def build_match_analytics(
    clients: Sequence[ClientForMatching],
    properties: Sequence[PropertyForMatching],
    top_limit: int = DEFAULT_TOP_MATCHES,
) -> MatchAnalytics:
    """
    Calcula todos los matches y arma las analíticas del dashboard.

    Args:
        clients: Clientes activos
        properties: Propiedades activas
        top_limit: Cantidad de mejores matches a incluir

    Returns:
        MatchAnalytics (vacío salvo totales si falta alguno de los lados)
    """
    if not clients or not properties:
        return MatchAnalytics(
            match_distribution=match_distribution([]),
            total_clients=len(clients),
            total_properties=len(properties),
        )

    results = calculate_batch_matches(clients, properties)
    fair = MATCH_THRESHOLDS["fair"]

    above = [r for r in results if r.overall_score >= fair]
    top_matches = sorted(
        above, key=lambda r: (-r.overall_score, r.client_id, r.property_id)
    )[:top_limit]

    average = round(sum(r.overall_score for r in results) / len(results))

    analytics = MatchAnalytics(
        top_matches=top_matches,
        match_distribution=match_distribution(results),
        unmatched_clients=unmatched_clients(clients, results, fair),
        hot_properties=hot_properties(properties, results, fair),
        total_clients=len(clients),
        total_properties=len(properties),
        average_match_score=average,
        clients_with_matches=len({r.client_id for r in above}),
    )

    logger.debug(
        "Analíticas de matching calculadas",
        clients=analytics.total_clients,
        properties=analytics.total_properties,
        above_threshold=len(above),
    )
    return analytics


def summary_stats(analytics: MatchAnalytics) -> dict:
    """Resumen rápido para el widget del dashboard."""
    return {
        "total_clients": analytics.total_clients,
        "total_properties": analytics.total_properties,
        "matches_above_50": sum(
            b.count for b in analytics.match_distribution if b.min >= 51
        ),
        "matches_above_70": sum(
            b.count for b in analytics.match_distribution if b.min >= 71
        ),
        "average_score": analytics.average_match_score,
    }
