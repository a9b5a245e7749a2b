# inventory_engine/utils/utils.py
import math
import random
from typing import Dict, Hashable, Optional, Sequence, Tuple, TypeVar

K = TypeVar("K", bound=Hashable)


def weighted_random_selection(weights: Dict[K, float]) -> Optional[K]:
    """
    Pick a key from a {option: weight} map with probability proportional to its weight.

    Draws r in [0, total) and walks the options in insertion order, subtracting
    each weight until r drops to zero or below. Non-positive weights never win
    unless every weight is non-positive, in which case the first option is returned.
    """
    if not weights: return None

    options = list(weights.keys())
    total_weight = sum(max(0.0, w) for w in weights.values())
    if total_weight <= 0:
        return options[0]

    roll = random.random() * total_weight
    for option in options:
        weight = max(0.0, weights[option])
        if weight <= 0:
            continue
        roll -= weight
        if roll <= 0:
            return option

    # Float drift can leave roll marginally positive
    return options[0]


def round_half_up(value: float) -> int:
    """Rounds .5 away from zero for positive values (Python's round() uses banker's rounding)."""
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def normalize_weights(weights: Dict[K, float]) -> Dict[K, float]:
    """Scales weights so they sum to 1. Returns an empty dict when nothing is positive."""
    total = sum(max(0.0, w) for w in weights.values())
    if total <= 0:
        return {}
    return {key: max(0.0, w) / total for key, w in weights.items()}


def as_position(value) -> Optional[Tuple[float, float, float]]:
    """Accepts (x, y, z) sequences, {'x','y','z'} dicts or objects with x/y/z attributes."""
    if value is None: return None
    if isinstance(value, dict):
        if not all(k in value for k in ("x", "y", "z")):
            return None
        return (float(value["x"]), float(value["y"]), float(value["z"]))
    if isinstance(value, Sequence) and not isinstance(value, str):
        if len(value) < 3:
            return None
        return (float(value[0]), float(value[1]), float(value[2]))
    if all(hasattr(value, axis) for axis in ("x", "y", "z")):
        return (float(value.x), float(value.y), float(value.z))
    return None
