import logging
import math

from cache_capacity_modeling.interface import Footprint
from cache_capacity_modeling.interface import FootprintRequest
from cache_capacity_modeling.models import SizingModel
from cache_capacity_modeling.models.hash_table import hash_sizing_for_keys
from cache_capacity_modeling.models.utils import aligned_item_size
from cache_capacity_modeling.models.utils import bytes_to_mib

logger = logging.getLogger(__name__)


def footprint(request: FootprintRequest) -> Footprint:
    """Memory footprint of a single instance holding the whole dataset"""
    overhead = request.overhead
    item_size = aligned_item_size(
        request.item_size_bytes, overhead.item_overhead_bytes
    )
    segment_bytes = item_size * request.key_count

    hash_params = hash_sizing_for_keys(
        request.key_count,
        hash_occupancy=request.hash_occupancy,
        entry_overhead_bytes=overhead.hash_entry_overhead_bytes,
    )
    segment_memory_mib = bytes_to_mib(segment_bytes)
    logger.debug(
        "Footprint (item, segment, hash) = (%d B, %d MiB, %d MiB)",
        item_size,
        segment_memory_mib,
        hash_params.hash_memory_mib,
    )

    return Footprint(
        item_size_bytes=item_size,
        hash_bucket_exponent=hash_params.bucket_exponent,
        hash_memory_mib=hash_params.hash_memory_mib,
        segment_memory_mib=segment_memory_mib,
        total_memory_mib=segment_memory_mib + hash_params.hash_memory_mib,
        segment_count=int(math.ceil(segment_bytes / request.segment_size_bytes)),
    )


class FootprintModel(SizingModel):
    request_type = FootprintRequest

    @staticmethod
    def calculate(request: FootprintRequest) -> Footprint:
        return footprint(request)

    @staticmethod
    def description():
        return "Single instance segment cache memory footprint"

    @classmethod
    def default_request(cls) -> FootprintRequest:
        return FootprintRequest.default()


footprint_model = FootprintModel()
