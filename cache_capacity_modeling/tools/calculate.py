import argparse
import logging
import sys
import textwrap
from typing import Any
from typing import Optional
from typing import Sequence

from cache_capacity_modeling import capacity_planner
from cache_capacity_modeling.constants import DEFAULT_FAILURE_DOMAIN
from cache_capacity_modeling.constants import DEFAULT_HASH_OCCUPANCY
from cache_capacity_modeling.constants import DEFAULT_NCONN
from cache_capacity_modeling.constants import DEFAULT_NKEY
from cache_capacity_modeling.constants import DEFAULT_QPS
from cache_capacity_modeling.constants import DEFAULT_SEGMENT_SIZE
from cache_capacity_modeling.constants import DEFAULT_SIZE
from cache_capacity_modeling.constants import FAILURE_DOMAIN_RANGE
from cache_capacity_modeling.constants import GIB_IN_BYTES
from cache_capacity_modeling.constants import RAM_CANDIDATES
from cache_capacity_modeling.interface import CalculationResult
from cache_capacity_modeling.interface import Footprint
from cache_capacity_modeling.interface import FootprintRequest
from cache_capacity_modeling.interface import ServiceFlavor
from cache_capacity_modeling.interface import SizingRequest


def format_request(request: SizingRequest) -> str:
    data_gib = request.item_size_bytes * request.key_count / GIB_IN_BYTES
    return textwrap.dedent(
        f"""
        Requirement:
          qps:             {request.qps:g}
          key-val size:    {request.item_size_bytes}
          number of keys:  {request.key_count}
          data, computed:  {data_gib:.1f} GiB
          number of conn:  {request.connection_count} per server
          failure domain:  {request.failure_domain_percent:.1f} %
        """
    )


def format_result(request: SizingRequest, result: CalculationResult) -> str:
    job = result.allocation
    runnable = ""
    if job.hash_bucket_exponent is not None:
        runnable = textwrap.dedent(
            f"""
            {request.service_flavor} config:
              hash_power:      {job.hash_bucket_exponent}
              seg_mem:         {job.segment_memory_mib} MiB
            """
        )
    return runnable + textwrap.dedent(
        f"""
        job config:
          cpu:             {job.cpu_cores}
          ram:             {job.ram_gib:g} GiB
          disk:            {job.disk_gib} GiB
          instances:       {job.instance_count}
          host limit:      {job.host_limit}
          rack limit:      {job.rack_limit}

        Cluster sizing is primarily driven by {result.bottleneck}.
        """
    )


def format_footprint(result: Footprint) -> str:
    return textwrap.dedent(
        f"""
        segcache config:
          hash_power:      {result.hash_bucket_exponent}
          seg_mem:         {result.segment_memory_mib} MiB
          segments:        {result.segment_count}
          total memory:    {result.total_memory_mib} MiB
        """
    )


def _cluster(args: Any) -> int:
    request = SizingRequest(
        qps=args.qps,
        item_size_bytes=args.size,
        key_count=args.nkey,
        connection_count=args.nconn,
        failure_domain_percent=args.failure_domain,
        ram_candidates_gib=args.ram,
        service_flavor=args.flavor,
        tls=args.tls,
    )
    result = capacity_planner.planner.size_cluster(request)
    if result is None:
        print(
            "ERROR: the dataset does not fit any of the candidate ram sizes "
            f"{list(request.ram_candidates_gib)} GiB",
            file=sys.stderr,
        )
        return 1
    if args.json:
        print(result.model_dump_json(indent=2))
    else:
        print(format_request(request))
        print(format_result(request, result))
    return 0


def _footprint(args: Any) -> int:
    request = FootprintRequest(
        item_size_bytes=args.size,
        key_count=args.nkey,
        hash_occupancy=args.hash_occupancy,
        segment_size_bytes=args.segment_size,
    )
    result = capacity_planner.planner.footprint(request)
    if args.json:
        print(result.model_dump_json(indent=2))
    else:
        print(format_footprint(result))
    return 0


def main(args: Any) -> int:
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.command == "cluster":
        return _cluster(args)
    return _footprint(args)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cache-capacity",
        description=(
            "Calculates the resource requirement of a cache cluster, or the "
            "memory footprint of a single cache instance"
        ),
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--json", action="store_true", help="Output JSON")
    parser.add_argument("--debug", action="store_true", help="Show verbose output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    cluster = subparsers.add_parser(
        "cluster",
        help="Size a cluster of cache (or ping) jobs",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    cluster.add_argument("--qps", type=float, default=DEFAULT_QPS)
    cluster.add_argument(
        "--size", type=int, default=DEFAULT_SIZE, help="key+value size in bytes"
    )
    cluster.add_argument(
        "--nkey", type=int, default=DEFAULT_NKEY, help="number of keys"
    )
    cluster.add_argument(
        "--nconn",
        type=int,
        default=DEFAULT_NCONN,
        help="number of connections to each server",
    )
    cluster.add_argument(
        "--failure-domain",
        type=float,
        default=DEFAULT_FAILURE_DOMAIN,
        help=(
            "percentage of servers/data that may be lost simultaneously, "
            f"acceptable range {FAILURE_DOMAIN_RANGE[0]:.1f}%% - "
            f"{FAILURE_DOMAIN_RANGE[1]:.1f}%%"
        ),
    )
    cluster.add_argument(
        "--ram",
        nargs="+",
        type=float,
        default=list(RAM_CANDIDATES),
        help="container ram sizes to consider, in GiB",
    )
    cluster.add_argument(
        "--tls", action="store_true", help="connections use TLS buffers"
    )
    cluster.add_argument(
        "flavor",
        nargs="?",
        type=ServiceFlavor,
        default=ServiceFlavor.cache,
        choices=list(ServiceFlavor),
        help="flavor of backend",
    )

    fp = subparsers.add_parser(
        "footprint",
        help="Memory footprint of a single segcache instance",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    fp.add_argument(
        "--size", type=int, default=DEFAULT_SIZE, help="key+value size in bytes"
    )
    fp.add_argument("--nkey", type=int, default=DEFAULT_NKEY, help="number of keys")
    fp.add_argument(
        "--hash-occupancy",
        type=float,
        default=DEFAULT_HASH_OCCUPANCY,
        help="average number of keys per hash bucket",
    )
    fp.add_argument(
        "--segment-size",
        type=int,
        default=DEFAULT_SEGMENT_SIZE,
        help="segment size in bytes",
    )
    return parser


def cli(argv: Optional[Sequence[str]] = None) -> None:
    sys.exit(main(build_parser().parse_args(argv)))


if __name__ == "__main__":
    cli()
