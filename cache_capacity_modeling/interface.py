from __future__ import annotations

import math
from enum import Enum
from typing import Dict
from typing import Optional
from typing import Tuple
from typing import Union

from pydantic import BaseModel
from pydantic import computed_field
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator

from cache_capacity_modeling.constants import CAS_SIZE
from cache_capacity_modeling.constants import DEFAULT_FAILURE_DOMAIN
from cache_capacity_modeling.constants import DEFAULT_HASH_OCCUPANCY
from cache_capacity_modeling.constants import DEFAULT_NCONN
from cache_capacity_modeling.constants import DEFAULT_NKEY
from cache_capacity_modeling.constants import DEFAULT_QPS
from cache_capacity_modeling.constants import DEFAULT_SEGMENT_SIZE
from cache_capacity_modeling.constants import DEFAULT_SIZE
from cache_capacity_modeling.constants import HASH_ENTRY_OVERHEAD
from cache_capacity_modeling.constants import ITEM_HEADER_SIZE
from cache_capacity_modeling.constants import MIB_IN_BYTES
from cache_capacity_modeling.constants import RAM_CANDIDATES


class ExcludeUnsetModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    def model_dump(self, *args, **kwargs):
        if "exclude_unset" not in kwargs:
            kwargs["exclude_unset"] = True
        return super().model_dump(*args, **kwargs)

    def model_dump_json(self, *args, **kwargs):
        if "exclude_unset" not in kwargs:
            kwargs["exclude_unset"] = True
        return super().model_dump_json(*args, **kwargs)


###############################################################################
#              Models (structs) for how we describe the service               #
###############################################################################


class ServiceFlavor(str, Enum):
    """Represents the backend being sized

    Data storing flavors pay a per item and per hash entry overhead and are
    sized against memory. The stateless flavor only answers pings, so memory
    never bounds it.
    """

    def __str__(self):
        return str(self.value)

    cache = "cache"
    replicated_cache = "replicated-cache"
    stateless_ping = "stateless-ping"


class FlavorOverhead(ExcludeUnsetModel):
    # Item header plus CAS, added to every key+value before alignment
    item_overhead_bytes: int = 0
    # Bytes per hash table bucket
    hash_entry_overhead_bytes: int = 0
    stores_data: bool = False


FLAVOR_OVERHEADS: Dict[ServiceFlavor, FlavorOverhead] = {
    ServiceFlavor.cache: FlavorOverhead(
        item_overhead_bytes=ITEM_HEADER_SIZE + CAS_SIZE,
        hash_entry_overhead_bytes=HASH_ENTRY_OVERHEAD,
        stores_data=True,
    ),
    ServiceFlavor.replicated_cache: FlavorOverhead(
        item_overhead_bytes=ITEM_HEADER_SIZE + CAS_SIZE,
        hash_entry_overhead_bytes=HASH_ENTRY_OVERHEAD,
        stores_data=True,
    ),
    ServiceFlavor.stateless_ping: FlavorOverhead(),
}


class Bottleneck(str, Enum):
    """The single resource dimension that determined the instance count"""

    def __str__(self):
        return str(self.value)

    throughput = "throughput"
    fault_tolerance = "fault-tolerance"
    memory = "memory"


###############################################################################
#                  Models (structs) for what the user wants                   #
###############################################################################


class SizingRequest(ExcludeUnsetModel):
    """Workload parameters for sizing a whole cluster

    Only values which would make the arithmetic undefined are rejected here,
    the documented ranges in constants are advisory.
    """

    # Queries per second across the whole cluster
    qps: float = Field(default=DEFAULT_QPS, gt=0)
    # Average key+value size
    item_size_bytes: int = Field(default=DEFAULT_SIZE, gt=0)
    key_count: int = Field(default=DEFAULT_NKEY, gt=0)
    # Connections to each server
    connection_count: int = Field(default=DEFAULT_NCONN, ge=0)
    # Percentage of the servers (and data) that may be lost simultaneously
    failure_domain_percent: float = DEFAULT_FAILURE_DOMAIN
    # Container ram sizes to consider, whole GiB tiers are kept as ints
    ram_candidates_gib: Tuple[Union[int, float], ...] = Field(
        default=RAM_CANDIDATES, min_length=1
    )
    service_flavor: ServiceFlavor = ServiceFlavor.cache
    # TLS connections carry larger buffers
    tls: bool = False

    @field_validator("failure_domain_percent")
    @classmethod
    def _nonzero_failure_domain(cls, value: float) -> float:
        # Negative values are out of range but still computable
        if value == 0:
            raise ValueError("failure domain can not be 0%")
        return value

    @field_validator("ram_candidates_gib")
    @classmethod
    def _distinct_sorted_ram(
        cls, value: Tuple[Union[int, float], ...]
    ) -> Tuple[Union[int, float], ...]:
        if any(ram <= 0 for ram in value):
            raise ValueError(f"ram candidates must be positive, got {value}")
        return tuple(
            sorted({int(ram) if float(ram).is_integer() else ram for ram in value})
        )

    @property
    def overhead(self) -> FlavorOverhead:
        return FLAVOR_OVERHEADS[self.service_flavor]

    @staticmethod
    def default(flavor: ServiceFlavor = ServiceFlavor.cache) -> SizingRequest:
        return SizingRequest(service_flavor=flavor)


class FootprintRequest(ExcludeUnsetModel):
    """Parameters for the memory footprint of a single cache instance"""

    item_size_bytes: int = Field(default=DEFAULT_SIZE, gt=0)
    key_count: int = Field(default=DEFAULT_NKEY, gt=0)
    # Average number of keys per hash bucket, None means one key per bucket
    hash_occupancy: Optional[float] = Field(default=None, gt=0)
    # Only used to report how many segments the data occupies
    segment_size_bytes: int = Field(default=DEFAULT_SEGMENT_SIZE, gt=0)
    service_flavor: ServiceFlavor = ServiceFlavor.cache

    @property
    def overhead(self) -> FlavorOverhead:
        return FLAVOR_OVERHEADS[self.service_flavor]

    @staticmethod
    def default() -> FootprintRequest:
        return FootprintRequest(hash_occupancy=DEFAULT_HASH_OCCUPANCY)


###############################################################################
#                Models (structs) for what the models compute                 #
###############################################################################


class HashSizing(ExcludeUnsetModel):
    # The table has 2 ** bucket_exponent buckets
    bucket_exponent: int = Field(ge=0)
    hash_memory_bytes: int = Field(ge=0)

    @computed_field(return_type=int)  # type: ignore
    @property
    def bucket_count(self):
        return 2**self.bucket_exponent

    @computed_field(return_type=int)  # type: ignore
    @property
    def hash_memory_mib(self):
        return math.ceil(self.hash_memory_bytes / MIB_IN_BYTES)


class Footprint(ExcludeUnsetModel):
    # key+value plus item overhead, rounded up to the alignment
    item_size_bytes: int
    hash_bucket_exponent: int
    hash_memory_mib: int
    segment_memory_mib: int
    total_memory_mib: int
    segment_count: int


class JobAllocation(ExcludeUnsetModel):
    cpu_cores: float
    ram_gib: Union[int, float]
    disk_gib: int
    instance_count: int
    # How many instances may share a rack or a host without losing more than
    # the failure domain
    rack_limit: int
    host_limit: int

    # Only set for flavors that store data
    hash_bucket_exponent: Optional[int] = None
    segment_memory_mib: Optional[int] = None


class CalculationResult(ExcludeUnsetModel):
    allocation: JobAllocation
    bottleneck: Bottleneck
    advisories: Tuple[str, ...] = ()
