"""
Modelos de datos del sistema.

Registros de entrada del motor de matching:
- ClientForMatching: cliente con sus preferencias
- PropertyForMatching: propiedad con sus atributos
"""

from propmatch.models.client import ClientForMatching, ClientPropertyPreferences
from propmatch.models.property import PropertyForMatching

__all__ = [
    "ClientForMatching",
    "ClientPropertyPreferences",
    "PropertyForMatching",
]
