"""
Destination scoring: keyword bonuses, budget adjustment and ranking.
"""

import pytest

from app.api.schemas import DestinationRead
from app.core.recommender.scoring import score_destination, recommend_destinations


def make_destination(dest_id, cost, base=50.0):
    return DestinationRead(
        id=dest_id,
        name=dest_id.title(),
        country="Somewhere",
        description="",
        image="https://example.com/x.jpg",
        estimated_cost=cost,
        duration="5 days",
        coordinates={"lat": 0, "lng": 0},
        match_score=base,
    )


CATALOG = [
    make_destination("swiss-alps", 2800, 70),
    make_destination("banff", 2200, 68),
    make_destination("maldives", 4500, 72),
    make_destination("santorini", 2600, 74),
    make_destination("kyoto", 2400, 75),
    make_destination("tuscany", 2100, 71),
]


class TestScoreDestination:
    def test_keyword_bonus_and_within_budget(self):
        dest = make_destination("swiss-alps", 2000)
        assert score_destination(dest, "A peaceful MOUNTAIN retreat", 2500) == 50 + 20 + 10

    def test_keyword_does_not_apply_to_other_ids(self):
        dest = make_destination("kyoto", 2000)
        assert score_destination(dest, "mountains please", 2500) == 60

    def test_cost_equal_to_budget_counts_as_within(self):
        assert score_destination(make_destination("x", 2500), "", 2500) == 60

    def test_between_budget_and_one_and_a_half_is_neutral(self):
        assert score_destination(make_destination("x", 3000), "", 2500) == 50
        assert score_destination(make_destination("x", 3750), "", 2500) == 50

    def test_far_over_budget_penalized(self):
        assert score_destination(make_destination("x", 3751), "", 2500) == 30

    def test_multiple_rules_can_stack_on_one_wish(self):
        wish = "beach and wine"
        assert score_destination(make_destination("maldives", 100), wish, 2500) == 80
        assert score_destination(make_destination("tuscany", 100), wish, 2500) == 80


class TestRecommendDestinations:
    def test_culture_wish_puts_kyoto_first(self):
        ranked = recommend_destinations("temple culture trip", 2500, CATALOG)
        assert ranked[0].id == "kyoto"
        assert ranked[0].match_score == 75 + 20 + 10

    def test_sorted_descending_and_limited(self):
        ranked = recommend_destinations("", 2500, CATALOG, count=3)
        assert len(ranked) == 3
        scores = [d.match_score for d in ranked]
        assert scores == sorted(scores, reverse=True)

    def test_far_over_budget_drops_maldives_to_last(self):
        ranked = recommend_destinations("", 2900, CATALOG)
        assert ranked[-1].id == "maldives"
        assert ranked[-1].match_score == 72 - 20

    def test_ties_keep_store_order(self):
        tied = [make_destination("a", 100), make_destination("b", 100), make_destination("c", 100)]
        assert [d.id for d in recommend_destinations("", 500, tied)] == ["a", "b", "c"]

    def test_originals_are_not_mutated(self):
        recommend_destinations("mountain", 2500, CATALOG)
        assert CATALOG[0].match_score == 70

    @pytest.mark.parametrize("count", [0, 10])
    def test_count_bounds(self, count):
        assert len(recommend_destinations("", 2500, CATALOG, count=count)) == min(count, len(CATALOG))
