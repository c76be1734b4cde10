from cache_capacity_modeling.interface import Bottleneck
from cache_capacity_modeling.interface import CalculationResult
from cache_capacity_modeling.interface import Footprint
from cache_capacity_modeling.interface import FootprintRequest
from cache_capacity_modeling.interface import ServiceFlavor
from cache_capacity_modeling.interface import SizingRequest
from cache_capacity_modeling.models.cluster import size_cluster
from cache_capacity_modeling.models.footprint import footprint
from cache_capacity_modeling.models.hash_table import hash_sizing

__all__ = [
    "Bottleneck",
    "CalculationResult",
    "Footprint",
    "FootprintRequest",
    "ServiceFlavor",
    "SizingRequest",
    "footprint",
    "hash_sizing",
    "size_cluster",
]
