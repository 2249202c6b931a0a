"""Integer averaging helpers (round half up, like the charts expect)."""


def ratio_half_up(numerator: int, denominator: int) -> int:
    """numerator / denominator rounded half up, in exact integer arithmetic."""
    if denominator <= 0:
        raise ValueError('denominator must be positive')
    return (2 * numerator + denominator) // (2 * denominator)


def mean_half_up(values):
    """Mean of integer values rounded half up, or None for no values."""
    values = list(values)
    if not values:
        return None
    return ratio_half_up(sum(values), len(values))


def percentage_half_up(part: int, total: int) -> int:
    return ratio_half_up(part * 100, total)
