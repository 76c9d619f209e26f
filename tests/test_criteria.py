"""Tests para los scorers por criterio."""

import pytest

from propmatch.matching.criteria import (
    create_score,
    score_amenities,
    score_bedrooms,
    score_budget,
    score_condition,
    score_elevator,
    score_energy_class,
    score_floor,
    score_furnished,
    score_heating,
    score_location,
    score_parking,
    score_pet_friendly,
    score_property_type,
    score_size,
    score_transaction_type,
)


class TestCreateScore:
    def test_clamps_to_range(self):
        assert create_score("budget", 150, "").score == 100
        assert create_score("budget", -20, "").score == 0

    def test_weighted_score(self):
        score = create_score("bedrooms", 75, "")
        assert score.weight == 8
        assert score.weighted_score == 6.0
        assert not score.matched

    def test_matched_from_threshold_or_flag(self):
        assert create_score("size", 80, "").matched
        assert create_score("amenities", 70, "", matched=True).matched

    def test_to_dict(self):
        data = create_score("budget", 100, "Price within budget", True).to_dict()
        assert data == {
            "criterion": "budget",
            "weight": 25,
            "score": 100.0,
            "weighted_score": 25.0,
            "matched": True,
            "reason": "Price within budget",
        }


class TestBudget:
    def test_within_budget(self, prefs_for, make_property):
        prefs = prefs_for(budget_min=200000, budget_max=300000)
        score = score_budget(prefs, make_property(price=250000))

        assert score.score == 100
        assert score.matched
        assert score.reason == "Price within budget"

    def test_over_budget_decays_linearly(self, prefs_for, make_property):
        prefs = prefs_for(budget_min=200000, budget_max=250000)
        score = score_budget(prefs, make_property(price=275000))

        assert score.score == pytest.approx(66.67)
        assert score.reason == "10% over budget"

    def test_over_budget_is_monotonic(self, prefs_for, make_property):
        prefs = prefs_for(budget_min=200000, budget_max=250000)
        prices = [250000, 252500, 275000, 322500, 325000]
        scores = [score_budget(prefs, make_property(price=p)).score for p in prices]

        assert scores == sorted(scores, reverse=True)
        assert scores[-1] == 0

    def test_under_budget_is_mild(self, prefs_for, make_property):
        prefs = prefs_for(budget_min=200000, budget_max=300000)

        assert score_budget(prefs, make_property(price=150000)).score == 85
        assert score_budget(prefs, make_property(price=50000)).score == 70

    def test_no_budget_is_neutral(self, prefs_for, make_property):
        score = score_budget(prefs_for(), make_property(price=250000))
        assert score.score == 80
        assert score.reason == "No budget constraints"

    def test_missing_price_is_unknown(self, prefs_for, make_property):
        prefs = prefs_for(budget_max=300000)
        assert score_budget(prefs, make_property()).score == 50

    def test_zero_max_does_not_divide(self, prefs_for, make_property):
        prefs = prefs_for(budget_max=0)
        assert score_budget(prefs, make_property(price=1000)).score == 0


class TestLocation:
    def test_no_preference(self, prefs_for, make_property):
        assert score_location(prefs_for(), make_property(area="Kifisia")).score == 80

    def test_exact_match(self, prefs_for, make_property):
        prefs = prefs_for(areas_of_interest=["Glyfada", "Kifisia"])
        score = score_location(prefs, make_property(area="Athens", municipality="Kifisia"))

        assert score.score == 100
        assert score.matched

    def test_partial_match(self, prefs_for, make_property):
        prefs = prefs_for(areas_of_interest=["Athens"])
        score = score_location(prefs, make_property(area="North Athens"))

        assert score.score == 75
        assert not score.matched

    def test_no_match(self, prefs_for, make_property):
        prefs = prefs_for(areas_of_interest="Palermo, Belgrano")
        assert score_location(prefs, make_property(address_city="Rosario")).score == 0

    def test_property_without_location(self, prefs_for, make_property):
        prefs = prefs_for(areas_of_interest=["Kifisia"])
        assert score_location(prefs, make_property()).score == 50


class TestTypes:
    def test_rent_against_sale_is_incompatible(self, prefs_for, make_property):
        score = score_transaction_type(prefs_for(intent="RENT"), make_property(transaction_type="SALE"))
        assert score.score == 0
        assert score.reason == "SALE incompatible with RENT"

    def test_buy_against_sale(self, prefs_for, make_property):
        score = score_transaction_type(prefs_for(intent="buy"), make_property(transaction_type="sale"))
        assert score.score == 100

    def test_rent_accepts_short_term(self, prefs_for, make_property):
        score = score_transaction_type(
            prefs_for(intent="RENT"), make_property(transaction_type="short term")
        )
        assert score.score == 100

    def test_missing_side(self, prefs_for, make_property):
        score = score_transaction_type(prefs_for(), make_property(transaction_type="SALE"))
        assert score.score == 80
        assert score.reason == "Transaction type not specified"

    def test_other_purpose_is_generic(self, prefs_for, make_property):
        score = score_property_type(prefs_for(purpose="OTHER"), make_property(property_type="APARTMENT"))
        assert score.score == 50

    def test_residential_against_warehouse(self, prefs_for, make_property):
        score = score_property_type(
            prefs_for(purpose="RESIDENTIAL"), make_property(property_type="WAREHOUSE")
        )
        assert score.score == 0

    def test_property_type_is_normalized(self, prefs_for, make_property):
        score = score_property_type(
            prefs_for(purpose="RESIDENTIAL"), make_property(property_type="apartment")
        )
        assert score.score == 100


class TestBedroomsAndSize:
    @pytest.mark.parametrize("bedrooms, expected", [(2, 100), (3, 100), (5, 50), (1, 75), (9, 0)])
    def test_bedrooms(self, prefs_for, make_property, bedrooms, expected):
        prefs = prefs_for(preferences={"bedrooms_min": 2, "bedrooms_max": 3})
        assert score_bedrooms(prefs, make_property(bedrooms=bedrooms)).score == expected

    def test_bedrooms_unknown(self, prefs_for, make_property):
        prefs = prefs_for(preferences={"bedrooms_min": 2})
        assert score_bedrooms(prefs, make_property()).score == 50

    @pytest.mark.parametrize("size, expected", [(90, 100), (120, 50), (60, 37.5), (150, 0)])
    def test_size(self, prefs_for, make_property, size, expected):
        prefs = prefs_for(preferences={"size_min_sqm": 80, "size_max_sqm": 100})
        assert score_size(prefs, make_property(size_net_sqm=size)).score == expected

    def test_size_from_square_feet(self, prefs_for, make_property):
        prefs = prefs_for(preferences={"size_min_sqm": 80, "size_max_sqm": 100})
        assert score_size(prefs, make_property(square_feet=1000)).score == 100


class TestAmenities:
    @pytest.fixture
    def prefs(self, prefs_for):
        return prefs_for(preferences={"amenities_required": ["pool"], "amenities_preferred": ["gym"]})

    def test_missing_required(self, prefs, make_property):
        score = score_amenities(prefs, make_property(amenities=["sauna"]))
        assert score.score == 0
        assert score.reason == "Missing 1 required amenities"

    def test_required_without_preferred(self, prefs, make_property):
        score = score_amenities(prefs, make_property(amenities=["Swimming Pool"]))
        assert score.score == 70
        assert score.matched

    def test_all_met(self, prefs, make_property):
        score = score_amenities(prefs, make_property(amenities={"pool": True, "gym": True}))
        assert score.score == 100

    def test_only_preferred(self, prefs_for, make_property):
        prefs = prefs_for(preferences={"amenities_preferred": ["pool", "gym"]})
        assert score_amenities(prefs, make_property(amenities=["pool"])).score == 50

    def test_partial_required(self, prefs_for, make_property):
        prefs = prefs_for(preferences={"amenities_required": ["pool", "garden"]})
        score = score_amenities(prefs, make_property(amenities=["pool", "gym", "sauna"]))
        assert score.score == 35

    def test_required_only_all_met(self, prefs_for, make_property):
        prefs = prefs_for(preferences={"amenities_required": ["pool"]})
        score = score_amenities(prefs, make_property(amenities=["pool"]))

        assert score.score == 70
        assert score.matched
        assert score.reason == "All required met, 0/0 preferred"

    def test_missing_required_caps_score_despite_preferred(self, prefs_for, make_property):
        prefs = prefs_for(
            preferences={
                "amenities_required": ["pool", "garden"],
                "amenities_preferred": ["gym", "sauna"],
            }
        )
        score = score_amenities(prefs, make_property(amenities=["pool", "gym", "sauna"]))

        assert score.score <= 70
        assert score.score == 35
        assert not score.matched

    def test_no_preferences(self, prefs_for, make_property):
        assert score_amenities(prefs_for(), make_property(amenities=["pool"])).score == 80


class TestFloor:
    def test_ground_only(self, prefs_for, make_property):
        prefs = prefs_for(preferences={"ground_floor_only": True})

        assert score_floor(prefs, make_property(floor="Ground")).score == 100
        assert score_floor(prefs, make_property(floor="2")).score == 0

    @pytest.mark.parametrize("floor, expected", [("2", 100), ("5", 70), ("Basement", 70), ("upstairs", 50)])
    def test_range(self, prefs_for, make_property, floor, expected):
        prefs = prefs_for(preferences={"floor_min": 1, "floor_max": 3})
        assert score_floor(prefs, make_property(floor=floor)).score == expected

    def test_no_preference(self, prefs_for, make_property):
        prefs = prefs_for(preferences={"ground_floor_only": False})
        assert score_floor(prefs, make_property(floor="2")).score == 80


class TestTertiary:
    def test_condition(self, prefs_for, make_property):
        prefs = prefs_for(preferences={"condition_preferences": ["EXCELLENT"]})

        assert score_condition(prefs, make_property(condition="new")).score == 100
        assert score_condition(prefs, make_property(condition="GOOD")).score == 0
        assert score_condition(prefs, make_property()).score == 50

    def test_furnished(self, prefs_for, make_property):
        prefs = prefs_for(preferences={"furnished_preference": "FULLY"})

        assert score_furnished(prefs, make_property(furnished="fully")).score == 100
        assert score_furnished(prefs, make_property(furnished="PARTIALLY")).score == 60
        assert score_furnished(prefs, make_property(furnished="no")).score == 0
        assert score_furnished(prefs, make_property()).score == 50

    def test_furnished_any(self, prefs_for, make_property):
        prefs = prefs_for(preferences={"furnished_preference": "ANY"})
        assert score_furnished(prefs, make_property(furnished="NO")).score == 80

    def test_heating(self, prefs_for, make_property):
        prefs = prefs_for(preferences={"heating_preferences": ["AUTONOMOUS"]})

        assert score_heating(prefs, make_property(heating_type="individual")).score == 100
        assert score_heating(prefs, make_property(heating_type="CENTRAL")).score == 30
        assert score_heating(prefs, make_property()).score == 50

    def test_energy_class(self, prefs_for, make_property):
        prefs = prefs_for(preferences={"energy_class_min": "B"})

        assert score_energy_class(prefs, make_property(energy_cert_class="A+")).score == 100
        assert score_energy_class(prefs, make_property(energy_cert_class="D")).score == 0
        assert score_energy_class(prefs, make_property()).score == 50

    @pytest.mark.parametrize("elevator, expected", [(True, 100), (False, 0), (None, 50)])
    def test_elevator(self, prefs_for, make_property, elevator, expected):
        prefs = prefs_for(preferences={"requires_elevator": True})
        assert score_elevator(prefs, make_property(elevator=elevator)).score == expected

    def test_elevator_not_required(self, prefs_for, make_property):
        assert score_elevator(prefs_for(), make_property(elevator=False)).score == 80

    @pytest.mark.parametrize("accepts_pets, expected", [(True, 100), (False, 0), (None, 50)])
    def test_pet_friendly(self, prefs_for, make_property, accepts_pets, expected):
        prefs = prefs_for(preferences={"requires_pet_friendly": True})
        assert score_pet_friendly(prefs, make_property(accepts_pets=accepts_pets)).score == expected


class TestParking:
    @pytest.fixture
    def prefs(self, prefs_for):
        return prefs_for(preferences={"requires_parking": True})

    def test_parking_property(self, prefs, make_property):
        score = score_parking(prefs, make_property(property_type="PARKING"))
        assert score.score == 100
        assert score.reason == "Is a parking space"

    @pytest.mark.parametrize(
        "fields, expected",
        [
            ({"parking_spaces": 2}, 100),
            ({"amenities": ["Garage"]}, 100),
            ({"parking_spaces": 0}, 0),
            ({"amenities": ["pool"]}, 0),
            ({}, 50),
        ],
    )
    def test_availability(self, prefs, make_property, fields, expected):
        assert score_parking(prefs, make_property(**fields)).score == expected

    def test_not_required(self, prefs_for, make_property):
        assert score_parking(prefs_for(), make_property(parking_spaces=0)).score == 80
