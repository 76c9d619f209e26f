"""Tests para la calculadora de matching."""

import itertools
import json

import pytest

from propmatch.matching import (
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
from propmatch.matching.weights import CRITERIA


class TestCalculateMatchScore:
    def test_ideal_pair(self, ideal_client, ideal_property):
        result = calculate_match_score(ideal_client, ideal_property)

        assert result.overall_score == pytest.approx(100.0)
        assert result.matched_criteria == 15
        assert result.total_criteria == 15
        assert result.quality == "excellent"

    def test_breakdown_follows_criteria_order(self, ideal_client, ideal_property):
        result = calculate_match_score(ideal_client, ideal_property)
        assert tuple(s.criterion for s in result.breakdown) == CRITERIA

    def test_empty_client_is_neutral(self, make_client, make_property):
        result = calculate_match_score(make_client(), make_property())

        assert all(s.score == 80 for s in result.breakdown)
        assert result.overall_score == pytest.approx(80.0)

    def test_overall_is_sum_of_weighted_scores(self, ideal_client, make_property):
        result = calculate_match_score(
            ideal_client, make_property(price=280000, bedrooms=5, floor="Ground")
        )
        total = sum(s.weighted_score for s in result.breakdown)
        assert result.overall_score == pytest.approx(total, abs=0.01)

    def test_transaction_mismatch_lowers_score(self, ideal_client, ideal_property, make_property):
        rental = make_property(**{**ideal_property.model_dump(), "transaction_type": "RENTAL"})

        ideal = calculate_match_score(ideal_client, ideal_property)
        mismatch = calculate_match_score(ideal_client, rental)

        assert mismatch.get_criterion("transaction_type").score == 0
        assert mismatch.overall_score == pytest.approx(ideal.overall_score - 15)

    def test_is_deterministic(self, ideal_client, ideal_property):
        first = calculate_match_score(ideal_client, ideal_property)
        second = calculate_match_score(ideal_client, ideal_property)
        assert first == second

    def test_get_unknown_criterion(self, ideal_client, ideal_property):
        result = calculate_match_score(ideal_client, ideal_property)
        assert result.get_criterion("view") is None

    def test_to_dict_is_json_serializable(self, ideal_client, ideal_property):
        data = calculate_match_score(ideal_client, ideal_property).to_dict()

        encoded = json.dumps(data)
        assert data["quality"] == "excellent"
        assert len(data["breakdown"]) == 15
        assert "calculated_at" in json.loads(encoded)


def test_scores_stay_in_range(make_client, make_property, ideal_client, ideal_property):
    clients = [
        ideal_client,
        make_client(id="c-empty"),
        make_client(id="c-rent", intent="RENT", purpose="COMMERCIAL", budget_max=500),
        make_client(id="c-zero", budget_min=0, budget_max=0, preferences={"floor_max": 0}),
    ]
    properties = [
        ideal_property,
        make_property(id="p-empty"),
        make_property(id="p-huge", price=10**9, size_net_sqm=5000, bedrooms=20, floor="99"),
        make_property(id="p-odd", price=0, floor="upstairs", amenities="not json"),
    ]

    for result in calculate_batch_matches(clients, properties):
        assert 0 <= result.overall_score <= 100
        assert all(0 <= s.score <= 100 for s in result.breakdown)


class TestBatch:
    def test_cartesian_product(self, make_client, make_property):
        clients = [make_client(id="c1"), make_client(id="c2")]
        properties = [make_property(id="p1"), make_property(id="p2"), make_property(id="p3")]

        results = calculate_batch_matches(clients, properties)

        assert len(results) == 6
        assert [(r.client_id, r.property_id) for r in results[:3]] == [
            ("c1", "p1"),
            ("c1", "p2"),
            ("c1", "p3"),
        ]

    def test_empty_inputs(self, make_client):
        assert calculate_batch_matches([make_client()], []) == []
        assert calculate_batch_matches([], []) == []

    def test_iter_is_lazy(self, make_client, make_property):
        clients = iter([make_client(id="c1"), make_client(id="c2")])
        properties = (make_property(id=f"p{i}") for i in range(2))

        first = list(itertools.islice(iter_batch_matches(clients, properties), 2))

        assert [r.property_id for r in first] == ["p0", "p1"]
        assert next(clients).id == "c2"


class TestRanking:
    def test_sorted_descending_with_id_tie_break(self, make_client, make_property):
        client = make_client(budget_min=100, budget_max=200)
        properties = [
            make_property(id="b", price=150),
            make_property(id="c", price=1000),
            make_property(id="a", price=150),
        ]

        results = find_matching_properties(client, properties)

        assert [r.property_id for r in results] == ["a", "b", "c"]

    def test_min_score_is_inclusive(self, make_client, make_property):
        client = make_client(budget_min=100, budget_max=200)
        properties = [make_property(id="in", price=150), make_property(id="out", price=1000)]

        results = find_matching_properties(client, properties, min_score=80)

        assert [r.property_id for r in results] == ["in"]
        exact = results[0].overall_score
        assert len(find_matching_properties(client, properties, min_score=exact)) == 1

    def test_limit(self, make_client, make_property):
        properties = [make_property(id=f"p{i}") for i in range(5)]
        assert len(find_matching_properties(make_client(), properties, limit=2)) == 2

    @pytest.mark.parametrize("limit, expected", [(None, 3), (0, 0), (-1, 0), (10, 3)])
    def test_limit_edges(self, make_client, make_property, limit, expected):
        properties = [make_property(id=f"p{i}") for i in range(3)]
        results = find_matching_properties(make_client(), properties, limit=limit)
        assert len(results) == expected

    def test_find_matching_clients(self, make_client, make_property):
        property = make_property(transaction_type="SALE")
        clients = [
            make_client(id="renter", intent="RENT"),
            make_client(id="buyer", intent="BUY"),
        ]

        results = find_matching_clients(property, clients)

        assert [r.client_id for r in results] == ["buyer", "renter"]
        assert results[0].property_id == property.id


class TestTopQueries:
    def test_uses_configured_limit(self, monkeypatch, make_client, make_property):
        monkeypatch.setenv("DEFAULT_MATCH_LIMIT", "1")
        properties = [make_property(id="p1"), make_property(id="p2")]

        assert len(top_properties_for_client(make_client(), properties)) == 1

    def test_uses_configured_min_score(self, monkeypatch, make_client, make_property):
        monkeypatch.setenv("DEFAULT_MIN_MATCH_SCORE", "90")
        clients = [make_client(id="c1"), make_client(id="c2")]

        assert top_clients_for_property(make_property(), clients) == []

    def test_defaults(self, make_client, make_property):
        clients = [make_client(id=f"c{i}") for i in range(25)]
        assert len(top_clients_for_property(make_property(), clients)) == 20


class TestQuality:
    @pytest.mark.parametrize(
        "score, band",
        [
            (100, "excellent"),
            (85, "excellent"),
            (84.99, "good"),
            (70, "good"),
            (50, "fair"),
            (25, "poor"),
            (24.9, "very_poor"),
            (0, "very_poor"),
        ],
    )
    def test_bands(self, score, band):
        assert classify_match_quality(score) == band


class TestCombineScores:
    def test_without_semantic_score(self):
        assert combine_match_scores(80, None) == 80

    def test_default_weights(self):
        assert combine_match_scores(80, 50) == 71

    def test_explicit_weights(self):
        assert combine_match_scores(80, 50, (0.5, 0.5)) == 65

    def test_configured_weight(self, monkeypatch):
        monkeypatch.setenv("SEMANTIC_WEIGHT", "0.5")
        assert combine_match_scores(80, 50) == 65
