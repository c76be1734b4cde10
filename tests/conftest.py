import pytest

from cache_capacity_modeling import capacity_planner
from cache_capacity_modeling.capacity_planner import CapacityPlanner
from cache_capacity_modeling.capacity_planner import default_models


@pytest.fixture(scope="session", autouse=True)
def configure_test_planner():
    """
    Replace the global planner with one that does not memoize.

    Every test then observes the advisories each calculation logs rather than
    a cached result from an earlier test.
    """
    test_planner = CapacityPlanner(cache_size=0)
    test_planner.register_group(default_models)

    capacity_planner.planner = test_planner

    yield test_planner
