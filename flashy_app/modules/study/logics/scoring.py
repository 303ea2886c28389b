import math


def compute_score(correct: int, wrong: int) -> int:
    """
    Percentage of answered cards that were right, 0 when nothing was answered.

    Halves round up (1 of 8 -> 13), not to even.
    """
    answered = correct + wrong
    if answered <= 0:
        return 0
    return int(math.floor(correct / answered * 100 + 0.5))
