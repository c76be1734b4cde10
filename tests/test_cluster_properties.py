"""
Property tests for the cluster sizing engine.

Inputs are drawn from the documented ranges with the default ram candidates.
"""

from hypothesis import given
from hypothesis import settings
from hypothesis import strategies as st

from cache_capacity_modeling.constants import MIB_IN_BYTES
from cache_capacity_modeling.interface import ServiceFlavor
from cache_capacity_modeling.interface import SizingRequest
from cache_capacity_modeling.models.cluster import instances_for_fault_tolerance
from cache_capacity_modeling.models.cluster import instances_for_throughput
from cache_capacity_modeling.models.cluster import size_cluster


@st.composite
def valid_qps(draw, min_qps=1, max_qps=100_000_000):
    """Generate valid queries-per-second values."""
    return draw(st.integers(min_value=min_qps, max_value=max_qps))


@st.composite
def valid_failure_domain(draw):
    """Generate failure domains within [0.1, 100] percent."""
    return draw(st.floats(min_value=0.1, max_value=100.0, allow_nan=False))


@st.composite
def valid_item_size(draw):
    """Generate key+value sizes between 8 bytes and 16 MiB."""
    return draw(st.integers(min_value=8, max_value=16 * MIB_IN_BYTES))


@st.composite
def valid_key_count(draw):
    """Generate key counts between 1K and 10M."""
    return draw(st.integers(min_value=1000, max_value=10_000_000))


@given(a=valid_qps(), b=valid_qps())
def test_more_qps_never_fewer_throughput_instances(a: int, b: int):
    low, high = sorted((a, b))
    assert instances_for_throughput(low) <= instances_for_throughput(high)


@given(a=valid_failure_domain(), b=valid_failure_domain())
def test_smaller_failure_domain_never_fewer_instances(a: float, b: float):
    low, high = sorted((a, b))
    assert instances_for_fault_tolerance(low) >= instances_for_fault_tolerance(high)


@given(
    qps=valid_qps(),
    fd=valid_failure_domain(),
    item_size=valid_item_size(),
    a=valid_key_count(),
    b=valid_key_count(),
)
@settings(max_examples=200, deadline=None)
def test_more_keys_never_fewer_instances(
    qps: int, fd: float, item_size: int, a: int, b: int
):
    low, high = sorted((a, b))
    fewer = size_cluster(
        SizingRequest(
            qps=qps, failure_domain_percent=fd, item_size_bytes=item_size, key_count=low
        )
    )
    more = size_cluster(
        SizingRequest(
            qps=qps,
            failure_domain_percent=fd,
            item_size_bytes=item_size,
            key_count=high,
        )
    )
    assert fewer is not None and more is not None
    assert fewer.allocation.instance_count <= more.allocation.instance_count


@given(
    qps=valid_qps(),
    fd=valid_failure_domain(),
    item_size=valid_item_size(),
    key_count=valid_key_count(),
)
@settings(deadline=None)
def test_stateless_ignores_dataset(qps: int, fd: float, item_size: int, key_count):
    result = size_cluster(
        SizingRequest(
            qps=qps,
            failure_domain_percent=fd,
            item_size_bytes=item_size,
            key_count=key_count,
            service_flavor=ServiceFlavor.stateless_ping,
        )
    )
    assert result is not None
    assert result.allocation.instance_count == max(
        instances_for_throughput(qps), instances_for_fault_tolerance(fd)
    )


@given(
    qps=valid_qps(),
    fd=valid_failure_domain(),
    item_size=valid_item_size(),
    key_count=valid_key_count(),
    ram=st.lists(st.sampled_from([1, 2, 4, 8, 16, 32]), min_size=1, max_size=5),
)
@settings(max_examples=200, deadline=None)
def test_selected_tier_is_a_candidate_and_idempotent(
    qps: int, fd: float, item_size: int, key_count: int, ram
):
    request = SizingRequest(
        qps=qps,
        failure_domain_percent=fd,
        item_size_bytes=item_size,
        key_count=key_count,
        ram_candidates_gib=ram,
    )
    result = size_cluster(request)
    again = size_cluster(request)
    if result is None:
        assert again is None
        return

    assert result.model_dump_json() == again.model_dump_json()
    assert result.allocation.ram_gib in request.ram_candidates_gib
    assert min(ram) <= result.allocation.ram_gib <= max(ram)
    assert result.allocation.instance_count >= instances_for_throughput(qps)
    assert result.allocation.instance_count >= instances_for_fault_tolerance(fd)
    assert result.allocation.segment_memory_mib > 0
