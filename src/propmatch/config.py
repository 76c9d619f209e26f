"""
Configuración centralizada del sistema.
Carga variables de entorno y define settings globales.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Encontrar la raíz del proyecto (donde está el .env)
# config.py -> propmatch/ -> src/ -> project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"

# Defaults de las consultas top-N
DEFAULT_MIN_MATCH_SCORE = 40.0
DEFAULT_MATCH_LIMIT = 20


class Settings(BaseSettings):
    """Configuración principal de la aplicación."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Matching
    default_min_match_score: float = Field(
        DEFAULT_MIN_MATCH_SCORE, ge=0.0, le=100.0, description="Score mínimo para las consultas top-N"
    )
    default_match_limit: int = Field(
        DEFAULT_MATCH_LIMIT, ge=1, description="Máximo de resultados para las consultas top-N"
    )
    semantic_weight: float = Field(
        0.3,
        ge=0.0,
        le=1.0,
        description="Peso del score semántico al combinarlo con el score por reglas",
    )

    # Logging
    log_level: str = Field("INFO", description="Nivel de logging")


@lru_cache
def get_settings() -> Settings:
    """Obtiene la configuración cacheada."""
    return Settings()


# Constantes del sistema
CLIENT_INTENTS = ["BUY", "SELL", "RENT", "LEASE", "INVEST"]

PROPERTY_PURPOSES = ["RESIDENTIAL", "COMMERCIAL", "LAND", "PARKING", "OTHER"]

TRANSACTION_TYPES = ["SALE", "RENTAL", "SHORT_TERM", "EXCHANGE"]

PROPERTY_TYPES = [
    "RESIDENTIAL",
    "COMMERCIAL",
    "LAND",
    "RENTAL",
    "VACATION",
    "APARTMENT",
    "HOUSE",
    "MAISONETTE",
    "WAREHOUSE",
    "PARKING",
    "PLOT",
    "FARM",
    "INDUSTRIAL",
    "OTHER",
]

PROPERTY_CONDITIONS = ["EXCELLENT", "VERY_GOOD", "GOOD", "NEEDS_RENOVATION"]

FURNISHED_STATUSES = ["FULLY", "PARTIALLY", "UNFURNISHED"]

HEATING_TYPES = ["AUTONOMOUS", "CENTRAL", "NATURAL_GAS", "HEAT_PUMP", "ELECTRIC", "NONE"]

# Ordenadas de mejor a peor
ENERGY_CLASSES = ["A_PLUS", "A", "B", "C", "D", "E", "F", "G", "H", "IN_PROGRESS"]
