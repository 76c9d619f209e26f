"""
Configuración de pytest y fixtures compartidas.
"""

import pytest

from propmatch.config import get_settings
from propmatch.matching.normalizers import extract_preferences
from propmatch.models import ClientForMatching, PropertyForMatching


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Cada test arranca con settings recién leídos del entorno."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_client():
    """Factory de clientes: make_client(budget_max=..., preferences={...})."""

    def _make(id: str = "client-1", preferences=None, **fields) -> ClientForMatching:
        data = {"id": id, "client_name": f"Cliente {id}", **fields}
        if preferences is not None:
            data["property_preferences"] = preferences
        return ClientForMatching.model_validate(data)

    return _make


@pytest.fixture
def make_property():
    """Factory de propiedades: make_property(price=..., floor=...)."""

    def _make(id: str = "property-1", **fields) -> PropertyForMatching:
        data = {"id": id, "property_name": f"Propiedad {id}", **fields}
        return PropertyForMatching.model_validate(data)

    return _make


@pytest.fixture
def prefs_for(make_client):
    """Preferencias normalizadas a partir de campos del cliente."""

    def _prefs(preferences=None, **fields):
        return extract_preferences(make_client(preferences=preferences, **fields))

    return _prefs


@pytest.fixture
def ideal_client(make_client):
    """Cliente con preferencias en todos los criterios."""
    return make_client(
        id="client-ideal",
        intent="BUY",
        purpose="RESIDENTIAL",
        budget_min=200000,
        budget_max=300000,
        areas_of_interest=["Kifisia"],
        preferences={
            "bedrooms_min": 2,
            "bedrooms_max": 3,
            "size_min_sqm": 80,
            "size_max_sqm": 120,
            "floor_min": 1,
            "floor_max": 4,
            "requires_elevator": True,
            "requires_parking": True,
            "requires_pet_friendly": True,
            "furnished_preference": "FULLY",
            "heating_preferences": ["AUTONOMOUS"],
            "energy_class_min": "B",
            "condition_preferences": ["EXCELLENT"],
            "amenities_required": ["pool"],
            "amenities_preferred": ["gym"],
        },
    )


@pytest.fixture
def ideal_property(make_property):
    """Propiedad que cumple todas las preferencias de ideal_client."""
    return make_property(
        id="property-ideal",
        transaction_type="SALE",
        property_type="APARTMENT",
        price=250000,
        area="Kifisia",
        address_city="Athens",
        bedrooms=3,
        size_net_sqm=100,
        floor="2",
        elevator=True,
        accepts_pets=True,
        furnished="FULLY",
        heating_type="AUTONOMOUS",
        energy_cert_class="A",
        condition="EXCELLENT",
        amenities={"pool": True, "gym": True, "parking": True},
    )
