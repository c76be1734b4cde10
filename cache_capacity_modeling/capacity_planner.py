# -*- coding: utf-8 -*-
import functools
import logging
from typing import Any
from typing import Callable
from typing import Dict
from typing import Iterable
from typing import List
from typing import Optional
from typing import Tuple
from typing import Union

import numpy as np
from pydantic import BaseModel

from cache_capacity_modeling.interface import CalculationResult
from cache_capacity_modeling.interface import Footprint
from cache_capacity_modeling.interface import FootprintRequest
from cache_capacity_modeling.interface import SizingRequest
from cache_capacity_modeling.models import SizingModel
from cache_capacity_modeling.models.cluster import cluster_sizing_model
from cache_capacity_modeling.models.footprint import footprint_model

logger = logging.getLogger(__name__)


def default_models() -> Dict[str, SizingModel]:
    return {
        "cluster": cluster_sizing_model,
        "footprint": footprint_model,
    }


def log_spaced(
    low: float, high: float, num: int = 10, integer: bool = False
) -> List[float]:
    """Sample points evenly spaced on a log scale, inclusive of both ends

    QPS and key counts span several orders of magnitude so linear steps
    would spend almost every sample at the top of the range.
    """
    points = np.geomspace(low, high, num=num)
    if integer:
        return np.unique(np.ceil(points).astype(np.int64)).tolist()
    return points.tolist()


class CapacityPlanner:
    """Dispatches requests to registered sizing models

    Results are memoized by request value. Advisories are logged only when a
    result is first calculated, a cache hit returns them solely through
    CalculationResult.advisories. Pass cache_size=0 to log on every call.
    """

    def __init__(self, cache_size: int = 2048):
        self._models: Dict[str, SizingModel] = {}
        # Models are pure functions of their (frozen) request
        self._plan_cached = functools.lru_cache(maxsize=cache_size)(self._plan)

    def register_group(self, group: Callable[[], Dict[str, SizingModel]]):
        for name, model in group().items():
            self.register_model(name, model)

    def register_model(self, name: str, sizing_model: SizingModel):
        self._models[name] = sizing_model
        self._plan_cached.cache_clear()

    @property
    def models(self) -> Dict[str, SizingModel]:
        return self._models

    def _model(self, model_name: str) -> SizingModel:
        if model_name not in self._models:
            raise ValueError(
                f"model_name={model_name} does not exist. "
                f"Try {sorted(list(self._models.keys()))}"
            )
        return self._models[model_name]

    def _plan(self, model_name: str, request: BaseModel) -> Optional[BaseModel]:
        return self._model(model_name).calculate(request)

    def plan(
        self, model_name: str, request: Union[BaseModel, Dict[str, Any], None] = None
    ) -> Optional[BaseModel]:
        model = self._model(model_name)
        if request is None:
            request = model.default_request()
        elif isinstance(request, dict):
            request = model.request_type.model_validate(request)
        return self._plan_cached(model_name, request)

    def size_cluster(self, request: SizingRequest) -> Optional[CalculationResult]:
        return self.plan("cluster", request)  # type: ignore[return-value]

    def footprint(self, request: FootprintRequest) -> Footprint:
        return self.plan("footprint", request)  # type: ignore[return-value]

    def sweep(
        self,
        request: SizingRequest,
        field: str,
        values: Iterable[Any],
        model_name: str = "cluster",
    ) -> List[Tuple[Any, Optional[BaseModel]]]:
        """Re-plan with one request field replaced by each of values

        Useful for charting where the bottleneck moves as e.g. qps grows.
        """
        request_type = self._model(model_name).request_type
        if field not in request_type.model_fields:
            raise ValueError(
                f"field={field} is not part of {request_type.__name__}. "
                f"Try {sorted(request_type.model_fields)}"
            )
        base = request.model_dump()
        results = []
        for value in values:
            swept = request_type.model_validate({**base, field: value})
            results.append((value, self.plan(model_name, swept)))
        logger.debug("Swept %s over %d values", field, len(results))
        return results


planner = CapacityPlanner()
planner.register_group(default_models)
