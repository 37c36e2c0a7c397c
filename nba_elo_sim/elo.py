from __future__ import annotations

K_FACTOR = 32.0
INITIAL_RATING = 1000.0


def expected_score(rating_a: float, rating_b: float) -> float:
    exponent = (rating_b - rating_a) / 400.0
    return 1.0 / (1.0 + 10.0 ** exponent)


def update_elo(rating_a: float, rating_b: float, a_won: bool) -> tuple[float, float, float]:
    """Return the new ratings of A and B plus the change applied to A."""
    expected_a = expected_score(rating_a, rating_b)
    actual_a = 1.0 if a_won else 0.0

    delta = K_FACTOR * (actual_a - expected_a)
    return rating_a + delta, rating_b - delta, delta
