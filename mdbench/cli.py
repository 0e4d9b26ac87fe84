"""
Command-line driver.

Usage:
    mdbench --config bench.yaml
    mdbench --config bench.yaml --threads 8 --seed 42
    mdbench --config bench.json --backend neo4j --output-dir results/
"""

import argparse
import json
import sys

import structlog
from pydantic import ValidationError

from mdbench.benchmark.runner import ThreadRunner
from mdbench.config.settings import get_settings
from mdbench.config.workload_config import load_bench_config
from mdbench.core.errors import BenchmarkError
from mdbench.observability.logging import configure_logging
from mdbench.store.factory import create_metadata_store

logger = structlog.get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mdbench",
        description="Drive synthetic read/write workloads against a graph metadata store",
    )
    parser.add_argument("--config", required=True, help="Bench config file (.yaml, .yml, .json)")
    parser.add_argument("--threads", type=int, default=None, help="Worker threads (overrides config)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (overrides config)")
    parser.add_argument("--sampler", choices=["zipf", "uniform"], default=None,
                        help="Popularity sampler")
    parser.add_argument("--backend", choices=["fake", "neo4j"], default=None,
                        help="Store backend")
    parser.add_argument("--output-dir", default=None, help="Write one JSON result per workload")
    parser.add_argument("--abort-on-failure", action="store_true",
                        help="Stop a workload at its first failed operation")
    parser.add_argument("--log-format", choices=["json", "console"], default=None)
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default=None)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()

    configure_logging(
        level=args.log_level or settings.log_level,
        format=args.log_format or settings.observability.log_format,
        service_name=settings.app_name,
    )

    try:
        bench_config = load_bench_config(args.config)
    except (OSError, ValueError, ValidationError) as e:
        logger.error("Invalid bench config", path=args.config, error=str(e))
        return 1

    updates = {}
    if args.seed is not None:
        updates["seed"] = args.seed
    elif bench_config.seed is None and settings.bench.seed is not None:
        updates["seed"] = settings.bench.seed
    if updates:
        bench_config = bench_config.model_copy(update=updates)

    if args.threads:
        num_threads = args.threads
    elif "thread_env_config" in bench_config.model_fields_set:
        num_threads = bench_config.thread_env_config.num_threads
    else:
        num_threads = settings.bench.num_threads
    store_settings = settings.store
    if args.backend:
        store_settings = store_settings.model_copy(update={"backend": args.backend})

    output_dir = args.output_dir
    if output_dir is None and settings.bench.save_results:
        output_dir = settings.bench.output_dir

    try:
        with create_metadata_store(store_settings) as store:
            runner = ThreadRunner(
                store,
                num_threads=num_threads,
                abort_on_failure=args.abort_on_failure or settings.bench.abort_on_failure,
                report_interval=settings.bench.report_interval,
                output_dir=output_dir,
            )
            runner.run(bench_config, sampler=args.sampler or settings.bench.sampler)
    except BenchmarkError as e:
        logger.error("Benchmark setup failed", error=str(e), error_type=type(e).__name__)
        return 1

    print(json.dumps(runner.get_summary(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
