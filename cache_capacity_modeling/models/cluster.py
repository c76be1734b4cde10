import logging
import math
from typing import List
from typing import Optional
from typing import Sequence
from typing import Tuple

from cache_capacity_modeling.constants import BASE_OVERHEAD
from cache_capacity_modeling.constants import CONN_OVERHEAD
from cache_capacity_modeling.constants import CPU_PER_JOB
from cache_capacity_modeling.constants import DISK_PER_JOB
from cache_capacity_modeling.constants import FAILURE_DOMAIN_RANGE
from cache_capacity_modeling.constants import GIB_IN_MIB
from cache_capacity_modeling.constants import KQPS
from cache_capacity_modeling.constants import MAX_HOST_LIMIT
from cache_capacity_modeling.constants import MIB_IN_BYTES
from cache_capacity_modeling.constants import RACK_TO_HOST_RATIO
from cache_capacity_modeling.constants import SAFETY_BUF
from cache_capacity_modeling.constants import TLS_OVERHEAD
from cache_capacity_modeling.constants import WARNING_THRESHOLD
from cache_capacity_modeling.interface import Bottleneck
from cache_capacity_modeling.interface import CalculationResult
from cache_capacity_modeling.interface import JobAllocation
from cache_capacity_modeling.interface import ServiceFlavor
from cache_capacity_modeling.interface import SizingRequest
from cache_capacity_modeling.models import SizingModel
from cache_capacity_modeling.models.hash_table import hash_sizing
from cache_capacity_modeling.models.utils import aligned_item_size
from cache_capacity_modeling.models.utils import bytes_to_mib
from cache_capacity_modeling.models.utils import mib_to_gib

logger = logging.getLogger(__name__)


def instances_for_throughput(qps: float) -> int:
    return int(math.ceil(qps / KQPS))


def instances_for_fault_tolerance(failure_domain_percent: float) -> int:
    # Losing failure_domain_percent of the fleet loses at most one instance
    return int(math.ceil(100.0 / failure_domain_percent))


def placement_limits(
    instance_count: int, failure_domain_percent: float
) -> Tuple[int, int]:
    """How many instances may share a (rack, host)

    instance_count >= 100 / failure_domain_percent, so a rack can always
    take at least one instance.
    """
    rack_limit = max(
        1, int(math.floor(instance_count * failure_domain_percent / 100))
    )
    host_limit = int(
        math.floor(min(MAX_HOST_LIMIT, max(1, rack_limit / RACK_TO_HOST_RATIO)))
    )
    return rack_limit, host_limit


def memory_bound_instances(
    ram_candidates_gib: Sequence[float],
    data_mib: float,
    key_count: int,
    reserved_mib: int,
    hash_entry_overhead_bytes: int,
) -> List[float]:
    """Instances needed per ram tier if memory were the only constraint

    A tier whose ram cannot even cover the per-job overheads can not host
    any data and needs math.inf instances.
    """
    result: List[float] = []
    for ram_gib in ram_candidates_gib:
        ram = ram_gib * GIB_IN_MIB
        # number of shards, lower bound
        n_low = int(math.ceil(data_mib / ram))
        # number of keys per shard, upper bound
        keys_per_shard = key_count / n_low
        # so the hash memory is an upper bound as well
        ram_hash = hash_sizing(
            keys_per_shard, hash_entry_overhead_bytes
        ).hash_memory_mib
        usable = ram - reserved_mib - ram_hash
        if usable <= 0:
            logger.debug("ram=%s GiB cannot host any data", ram_gib)
            result.append(math.inf)
        else:
            result.append(int(math.ceil(data_mib / usable)))
    return result


def select_ram_tier(
    njob_mem: Sequence[float], njob: int
) -> Tuple[int, Optional[float]]:
    """Pick the ram tier index and the memory bound instance count to honour

    Prefer larger ram if it reduces the job count:
      * if the cluster needs larger job ram AND more instances due to
        memory, take the larger tier's count
      * if the cluster is memory bound with smaller job ram but bound
        elsewhere with larger ones, use the larger ram
      * otherwise use the smallest job ram and keep the job count
    Returns (0, None) when memory does not bind. Only adjacent pairs are
    compared, so a single candidate never makes memory the bottleneck.
    """
    for i in range(len(njob_mem) - 1, 0, -1):
        if njob_mem[i] > njob or njob_mem[i - 1] > njob:
            return i, njob_mem[i]
    return 0, None


# pylint: disable=too-many-locals
def size_cluster(request: SizingRequest) -> Optional[CalculationResult]:
    """Calculate job configuration according to requirements

    Returns None when the dataset does not fit any candidate ram tier.
    """
    advisories: List[str] = []
    fd = request.failure_domain_percent
    fd_low, fd_high = FAILURE_DOMAIN_RANGE
    if fd < fd_low or fd > fd_high:
        # Not clamped, the supplied value is still used below
        advisories.append(
            f"failure domain should be between {fd_low:.1f}% and {fd_high:.1f}%,"
            f" got {fd}%"
        )
        logger.warning(advisories[-1])

    # First calculate njob disregarding memory, note both njob & bottleneck
    # are not yet final
    njob_qps = instances_for_throughput(request.qps)
    njob_fd = instances_for_fault_tolerance(fd)
    if njob_qps >= njob_fd:
        bottleneck = Bottleneck.throughput
        njob = njob_qps
    else:
        bottleneck = Bottleneck.fault_tolerance
        njob = njob_fd

    # Per-job memory overhead, in MiB
    conn_overhead = TLS_OVERHEAD if request.tls else CONN_OVERHEAD
    ram_conn = bytes_to_mib(conn_overhead * request.connection_count)
    ram_fixed = BASE_OVERHEAD + SAFETY_BUF
    logger.debug(
        "Need (njob_qps, njob_fd, ram_conn, ram_fixed) = (%d, %d, %d, %d)",
        njob_qps,
        njob_fd,
        ram_conn,
        ram_fixed,
    )

    overhead = request.overhead
    # Nothing to store, so there is no dataset to shard
    if not overhead.stores_data:
        rack_limit, host_limit = placement_limits(njob, fd)
        return CalculationResult(
            allocation=JobAllocation(
                cpu_cores=CPU_PER_JOB,
                ram_gib=mib_to_gib(ram_conn + ram_fixed),
                disk_gib=DISK_PER_JOB,
                instance_count=njob,
                rack_limit=rack_limit,
                host_limit=host_limit,
            ),
            bottleneck=bottleneck,
            advisories=tuple(advisories),
        )

    # All ram related values below are in MiB
    item_size = aligned_item_size(
        request.item_size_bytes, overhead.item_overhead_bytes
    )
    ram_data = item_size * request.key_count / MIB_IN_BYTES
    sorted_ram = request.ram_candidates_gib
    njob_mem = memory_bound_instances(
        sorted_ram,
        data_mib=ram_data,
        key_count=request.key_count,
        reserved_mib=ram_fixed + ram_conn,
        hash_entry_overhead_bytes=overhead.hash_entry_overhead_bytes,
    )
    logger.debug("Memory bound instances per ram %s = %s", sorted_ram, njob_mem)

    index, njob_tier = select_ram_tier(njob_mem, njob)
    # Also catches a lone tier that cannot host data, which the scan skips
    if math.isinf(njob_mem[index]):
        logger.warning(
            "dataset (%.1f MiB) does not fit any candidate ram tier %s",
            ram_data,
            sorted_ram,
        )
        return None
    if njob_tier is not None:
        bottleneck = Bottleneck.memory
        njob = max(njob, int(njob_tier))

    if njob > WARNING_THRESHOLD:
        advisories.append(
            f"more than {WARNING_THRESHOLD} instances needed, please verify input."
        )
        logger.warning(advisories[-1])

    # Recalculate hash parameters exactly for the chosen ram
    ram_gib = sorted_ram[index]
    usable_mib = ram_gib * GIB_IN_MIB - ram_fixed - ram_conn
    keys_per_shard = usable_mib * MIB_IN_BYTES / item_size
    hash_params = hash_sizing(keys_per_shard, overhead.hash_entry_overhead_bytes)
    segment_mib = usable_mib - hash_params.hash_memory_mib

    rack_limit, host_limit = placement_limits(njob, fd)
    return CalculationResult(
        allocation=JobAllocation(
            cpu_cores=CPU_PER_JOB,
            ram_gib=ram_gib,
            disk_gib=DISK_PER_JOB,
            instance_count=njob,
            rack_limit=rack_limit,
            host_limit=host_limit,
            hash_bucket_exponent=hash_params.bucket_exponent,
            segment_memory_mib=int(segment_mib),
        ),
        bottleneck=bottleneck,
        advisories=tuple(advisories),
    )


class ClusterSizingModel(SizingModel):
    request_type = SizingRequest

    @staticmethod
    def calculate(request: SizingRequest) -> Optional[CalculationResult]:
        return size_cluster(request)

    @staticmethod
    def description():
        return "Key-value cache (or ping) cluster sizing model"

    @classmethod
    def default_request(cls) -> SizingRequest:
        return SizingRequest.default(ServiceFlavor.cache)


cluster_sizing_model = ClusterSizingModel()
