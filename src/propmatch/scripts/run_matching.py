"""
Script para ejecutar el matching sobre registros exportados a JSON.

Lee clientes y propiedades desde archivos JSON (lista de objetos),
calcula los matches y los imprime como JSON por stdout. Los logs van
por stderr.

Uso:
    python -m propmatch.scripts.run_matching --clients clients.json --properties properties.json
    python -m propmatch.scripts.run_matching ... --client-id c-1 --limit 5
    python -m propmatch.scripts.run_matching ... --property-id p-1 --min-score 60
    python -m propmatch.scripts.run_matching ... --analytics
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import structlog
from pydantic import BaseModel, ValidationError

from propmatch.config import get_settings
from propmatch.matching import (
    calculate_batch_matches,
    find_matching_clients,
    find_matching_properties,
)
from propmatch.matching.analytics import build_match_analytics
from propmatch.models import ClientForMatching, PropertyForMatching

logger = structlog.get_logger()


def configure_logging(level: str) -> None:
    """Configura structlog sobre logging estándar (stderr)."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        stream=sys.stderr,
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def load_records(path: Path, model: type[BaseModel]) -> list:
    """
    Carga una lista de registros JSON y los valida contra el modelo.

    Raises:
        OSError, json.JSONDecodeError, ValidationError, ValueError
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError(f"{path} debe contener una lista de objetos")

    return [model.model_validate(item) for item in data]


def _find_by_id(records: list, record_id: str):
    for record in records:
        if record.id == record_id:
            return record
    return None


def run_matching(
    clients_path: Path,
    properties_path: Path,
    client_id: Optional[str] = None,
    property_id: Optional[str] = None,
    analytics: bool = False,
    min_score: Optional[float] = None,
    limit: Optional[int] = None,
):
    """
    Ejecuta la consulta pedida y devuelve un objeto serializable.

    Returns:
        Lista de matches o dict de analíticas
    """
    clients = load_records(clients_path, ClientForMatching)
    properties = load_records(properties_path, PropertyForMatching)
    logger.info("Registros cargados", clients=len(clients), properties=len(properties))

    if analytics:
        return build_match_analytics(clients, properties).to_dict()

    settings = get_settings()
    if min_score is None:
        min_score = settings.default_min_match_score

    if client_id is not None:
        client = _find_by_id(clients, client_id)
        if client is None:
            raise LookupError(f"Cliente no encontrado: {client_id}")
        results = find_matching_properties(client, properties, min_score, limit)
    elif property_id is not None:
        property = _find_by_id(properties, property_id)
        if property is None:
            raise LookupError(f"Propiedad no encontrada: {property_id}")
        results = find_matching_clients(property, clients, min_score, limit)
    else:
        results = [
            r for r in calculate_batch_matches(clients, properties)
            if r.overall_score >= min_score
        ]
        results.sort(key=lambda r: (-r.overall_score, r.client_id, r.property_id))
        if limit is not None:
            results = results[:limit]

    logger.info("Matches encontrados", total=len(results), min_score=min_score)
    return [r.to_dict() for r in results]


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"debe ser >= 0: {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Calcula matches cliente-propiedad desde archivos JSON"
    )
    parser.add_argument("--clients", type=Path, required=True, help="JSON con clientes")
    parser.add_argument(
        "--properties", type=Path, required=True, help="JSON con propiedades"
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--client-id", help="Propiedades para este cliente")
    mode.add_argument("--property-id", help="Clientes para esta propiedad")
    mode.add_argument(
        "--analytics", action="store_true", help="Analíticas del dashboard"
    )

    parser.add_argument(
        "--min-score", type=float, default=None, help="Score mínimo (default: settings)"
    )
    parser.add_argument("--limit", type=_non_negative_int, default=None, help="Máximo de resultados")
    return parser


def main(argv: Optional[list[str]] = None):
    """Entry point del script."""
    args = build_parser().parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        output = run_matching(
            clients_path=args.clients,
            properties_path=args.properties,
            client_id=args.client_id,
            property_id=args.property_id,
            analytics=args.analytics,
            min_score=args.min_score,
            limit=args.limit,
        )
    except KeyboardInterrupt:
        logger.info("Matching interrumpido por usuario")
        sys.exit(130)
    except (OSError, ValueError, ValidationError, LookupError) as e:
        # json.JSONDecodeError es subclase de ValueError
        logger.error("Entrada inválida", error=str(e))
        sys.exit(1)

    json.dump(output, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    sys.exit(0)


if __name__ == "__main__":
    main()
