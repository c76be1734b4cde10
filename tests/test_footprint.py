import pytest
from pydantic import ValidationError

from cache_capacity_modeling.interface import FootprintRequest
from cache_capacity_modeling.interface import ServiceFlavor
from cache_capacity_modeling.models.footprint import footprint
from cache_capacity_modeling.models.footprint import footprint_model


def test_default_footprint():
    result = footprint(FootprintRequest.default())

    # 64 bytes + 13 bytes of header and cas, aligned to 8
    assert result.item_size_bytes == 80
    # 8,000,000 bytes rounds up to 8 MiB
    assert result.segment_memory_mib == 8
    assert result.hash_bucket_exponent == 18
    assert result.hash_memory_mib == 3
    assert result.total_memory_mib == 11
    assert result.segment_count == 8


def test_without_occupancy_one_key_per_bucket():
    result = footprint(FootprintRequest())
    assert result.hash_bucket_exponent == 17
    assert result.hash_memory_mib == 2
    assert result.total_memory_mib == 10


def test_higher_occupancy_needs_fewer_buckets():
    result = footprint(FootprintRequest(hash_occupancy=2.0))
    assert result.hash_bucket_exponent == 16
    assert result.hash_memory_mib == 1
    assert result.total_memory_mib == 9


@pytest.mark.parametrize("size,aligned", [(3, 16), (8, 24), (11, 24), (12, 32)])
def test_item_alignment(size, aligned):
    result = footprint(FootprintRequest(item_size_bytes=size))
    assert result.item_size_bytes == aligned


def test_segment_size_only_changes_segment_count():
    small = footprint(FootprintRequest.default())
    segmented = footprint(
        FootprintRequest(hash_occupancy=0.75, segment_size_bytes=64 * 1024)
    )
    assert segmented.total_memory_mib == small.total_memory_mib
    assert segmented.segment_memory_mib == small.segment_memory_mib
    # 8,000,000 / 65,536 = 122.07
    assert segmented.segment_count == 123


def test_stateless_flavor_has_no_overheads():
    result = footprint(FootprintRequest(service_flavor=ServiceFlavor.stateless_ping))
    assert result.item_size_bytes == 64
    assert result.hash_memory_mib == 0
    # 6,400,000 bytes
    assert result.segment_memory_mib == 7
    assert result.total_memory_mib == 7


def test_memory_rounds_up():
    result = footprint(FootprintRequest(item_size_bytes=8, key_count=1000))
    assert result.segment_memory_mib == 1
    assert result.hash_memory_mib == 1
    assert result.total_memory_mib == 2


@pytest.mark.parametrize(
    "kwargs",
    [
        {"key_count": 0},
        {"item_size_bytes": 0},
        {"hash_occupancy": 0},
        {"segment_size_bytes": -1},
    ],
)
def test_undefined_inputs_rejected(kwargs):
    with pytest.raises(ValidationError):
        FootprintRequest(**kwargs)


def test_model_metadata():
    assert footprint_model.description()
    assert footprint_model.default_request() == FootprintRequest.default()
    assert "hash_occupancy" in footprint_model.request_schema()["properties"]
