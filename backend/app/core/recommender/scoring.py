from typing import List, Sequence

from app.api.schemas import DestinationRead

KEYWORD_BONUS = 20
WITHIN_BUDGET_BONUS = 10
OVER_BUDGET_PENALTY = 20
OVER_BUDGET_FACTOR = 1.5

# (wish keywords, destination ids that get the bonus)
KEYWORD_RULES = (
    (("mountain", "peaceful"), ("swiss-alps", "banff")),
    (("beach", "luxury"), ("maldives", "santorini")),
    (("culture", "temple"), ("kyoto",)),
    (("wine", "countryside"), ("tuscany",)),
)


def score_destination(destination: DestinationRead, travel_wish: str, budget: float) -> float:
    wish = (travel_wish or "").lower()
    score = destination.match_score

    for keywords, ids in KEYWORD_RULES:
        if any(k in wish for k in keywords) and destination.id in ids:
            score += KEYWORD_BONUS

    if destination.estimated_cost <= budget:
        score += WITHIN_BUDGET_BONUS
    elif destination.estimated_cost > budget * OVER_BUDGET_FACTOR:
        score -= OVER_BUDGET_PENALTY

    return score


def recommend_destinations(
    travel_wish: str,
    budget: float,
    destinations: Sequence[DestinationRead],
    count: int = 6,
) -> List[DestinationRead]:
    """Best `count` destinations for the wish and budget, highest score first.

    Returns re-scored copies; ties keep their store order.
    """
    scored = [
        d.model_copy(update={"match_score": score_destination(d, travel_wish, budget)})
        for d in destinations
    ]
    scored.sort(key=lambda d: d.match_score, reverse=True)
    return scored[:max(count, 0)]
