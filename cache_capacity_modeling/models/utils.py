import math

from cache_capacity_modeling.constants import GIB_IN_MIB
from cache_capacity_modeling.constants import KEYVAL_ALIGNMENT
from cache_capacity_modeling.constants import MIB_IN_BYTES


# https://stackoverflow.com/questions/14267555/find-the-smallest-power-of-2-greater-than-or-equal-to-n-in-python
def power_of_2_exponent(y: float) -> int:
    """Smallest exponent e such that 2 ** e >= y, 0 for y <= 1

    Powers of two are integers, so rounding y up first does not change the
    answer and lets us stay in exact integer arithmetic instead of log2.
    """
    x = math.ceil(y)
    return 0 if x <= 1 else (x - 1).bit_length()


def next_n(x: float, n: float) -> int:
    return int(math.ceil(x / n)) * int(n)


def aligned_item_size(size_bytes: int, overhead_bytes: int) -> int:
    return next_n(overhead_bytes + size_bytes, KEYVAL_ALIGNMENT)


def bytes_to_mib(x: float) -> int:
    # Memory always rounds up, under provisioning is what we avoid
    return int(math.ceil(x / MIB_IN_BYTES))


def mib_to_gib(x: float) -> int:
    return int(math.ceil(x / GIB_IN_MIB))
