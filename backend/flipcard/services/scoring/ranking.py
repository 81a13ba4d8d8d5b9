import math
from typing import Sequence


RANKING_MESSAGES = [
    (99, "Amazing! You're in the top 1% of players!"),
    (90, "Great job! You're in the top 10% of players!"),
    (80, "Well done! You're in the top 20% of players!"),
    (50, "Good effort! You're in the top half of players!"),
]
DEFAULT_MESSAGE = "Keep practicing! You can improve your rank!"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_percentile(times: Sequence[int], value: int) -> float:
    """Share of recorded times at least as slow as ``value``, in percent.

    ``times`` must already contain ``value``. Rounded to one decimal place.
    """
    if not times:
        return 0.0
    at_or_slower = sum(1 for t in times if t >= value)
    return round_half_up(at_or_slower / len(times) * 1000) / 10


def ranking_message(percentile: float) -> str:
    # Thresholds are inclusive and checked highest first
    for threshold, message in RANKING_MESSAGES:
        if percentile >= threshold:
            return message
    return DEFAULT_MESSAGE
