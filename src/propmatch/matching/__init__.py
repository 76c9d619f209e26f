"""
Motor de matching.

Calcula la compatibilidad entre clientes y propiedades con un score
ponderado de 15 criterios y degradación graduada.
"""

from propmatch.matching.calculator import (
    MatchResult,
    calculate_batch_matches,
    calculate_match_score,
    classify_match_quality,
    combine_match_scores,
    find_matching_clients,
    find_matching_properties,
    iter_batch_matches,
    top_clients_for_property,
    top_properties_for_client,
)
from propmatch.matching.criteria import SCORERS, CriterionScore
from propmatch.matching.normalizers import MatchPreferences, extract_preferences
from propmatch.matching.weights import (
    CRITERION_WEIGHTS,
    INTENT_TO_TRANSACTION,
    MATCH_THRESHOLDS,
    PURPOSE_TO_PROPERTY_TYPE,
    validate_weights,
)

__all__ = [
    # Calculadora
    "MatchResult",
    "calculate_match_score",
    "calculate_batch_matches",
    "iter_batch_matches",
    "find_matching_properties",
    "find_matching_clients",
    "top_properties_for_client",
    "top_clients_for_property",
    "classify_match_quality",
    "combine_match_scores",
    # Criterios
    "CriterionScore",
    "SCORERS",
    # Preferencias
    "MatchPreferences",
    "extract_preferences",
    # Configuración
    "CRITERION_WEIGHTS",
    "MATCH_THRESHOLDS",
    "INTENT_TO_TRANSACTION",
    "PURPOSE_TO_PROPERTY_TYPE",
    "validate_weights",
]
