#!/usr/bin/env python3
"""
Utility script to check the intermediate files of a finished map phase.

Verifies that every (map task, bucket) file exists, decodes cleanly, and
only holds records whose key partitions to that bucket.

Usage:
    python3 scripts/check_map_output.py --job wc --num-map 3 --num-reduce 2 [--data-dir /mapreduce-data]
"""

import os
import sys
import argparse
import logging

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), '..'))

from common.errors import TaskError
from common.naming import intermediate_name
from common.partition import partition_for
from common.records import read_records
from worker.settings import WorkerSettings
from worker.task_logging import configure_logging

logger = logging.getLogger(__name__)


def check_intermediate_files(intermediate_dir: str, job_name: str, num_map: int, num_reduce: int) -> list:
    """
    Check all intermediate files of a job

    Args:
        intermediate_dir: Directory holding the intermediate files
        job_name: Job identifier
        num_map: Number of map tasks
        num_reduce: Number of reduce buckets

    Returns:
        List of problem descriptions; empty when the map output is valid
    """
    problems = []
    total_records = 0

    for map_task in range(num_map):
        for bucket in range(num_reduce):
            path = intermediate_name(job_name, map_task, bucket, intermediate_dir)
            count = 0
            try:
                for kv in read_records(path):
                    count += 1
                    expected = partition_for(kv.key, num_reduce)
                    if expected != bucket:
                        problems.append(f"{path}: key {kv.key!r} belongs in bucket {expected}")
            except TaskError as e:
                problems.append(str(e))
                continue

            total_records += count
            logger.info(f"Map task {map_task}, bucket {bucket}: {count} records")

    logger.info(f"Total records for job {job_name}: {total_records}")
    return problems


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Check that map tasks produced a valid set of intermediate files'
    )
    parser.add_argument('--data-dir', type=str, help='Data directory (default: $MAPREDUCE_DATA_DIR)')
    parser.add_argument('--job', type=str, required=True, help='Job name')
    parser.add_argument('--num-map', type=int, required=True, help='Number of map tasks')
    parser.add_argument('--num-reduce', type=int, required=True, help='Number of reduce tasks')
    args = parser.parse_args(argv)

    settings = WorkerSettings.from_env()
    if args.data_dir:
        settings.data_dir = args.data_dir
    configure_logging(settings)

    problems = check_intermediate_files(settings.intermediate_dir, args.job, args.num_map, args.num_reduce)
    for problem in problems:
        logger.error(problem)

    if problems:
        logger.error(f"Map output for job {args.job} is invalid: {len(problems)} problem(s)")
        return 1
    logger.info(f"Map output for job {args.job} is valid")
    return 0


if __name__ == '__main__':
    sys.exit(main())
