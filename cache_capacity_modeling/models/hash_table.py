from typing import Optional

from cache_capacity_modeling.constants import HASH_ENTRY_OVERHEAD
from cache_capacity_modeling.interface import HashSizing
from cache_capacity_modeling.models.utils import power_of_2_exponent


def hash_sizing(
    desired_slot_count: float, entry_overhead_bytes: int = HASH_ENTRY_OVERHEAD
) -> HashSizing:
    """Size a power of two hash table holding at least desired_slot_count

    The bucket exponent is the tightest one, 2 ** (e - 1) < slots <= 2 ** e,
    and anything up to a single slot gets a single bucket.
    """
    if desired_slot_count <= 0:
        raise ValueError(
            f"desired_slot_count must be positive, got {desired_slot_count}"
        )
    bucket_exponent = power_of_2_exponent(desired_slot_count)
    return HashSizing(
        bucket_exponent=bucket_exponent,
        hash_memory_bytes=entry_overhead_bytes * 2**bucket_exponent,
    )


def hash_sizing_for_keys(
    key_count: float,
    hash_occupancy: Optional[float] = None,
    entry_overhead_bytes: int = HASH_ENTRY_OVERHEAD,
) -> HashSizing:
    # More keys per bucket means fewer buckets
    desired_slot_count = key_count
    if hash_occupancy is not None:
        desired_slot_count = key_count / hash_occupancy
    return hash_sizing(desired_slot_count, entry_overhead_bytes)
