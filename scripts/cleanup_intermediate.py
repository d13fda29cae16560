#!/usr/bin/env python3
"""
Cleanup script for a job's intermediate files.
Removes the M x R intermediate files of one job, plus temporary files left
behind by killed tasks, so a scheduler can retry the map phase from scratch.
"""

import os
import sys
import glob
import argparse
import logging

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), '..'))

from common.naming import intermediate_name
from worker.settings import WorkerSettings
from worker.task_logging import configure_logging

logger = logging.getLogger(__name__)


def cleanup_intermediate(intermediate_dir: str, job_name: str, num_map: int, num_reduce: int,
                         dry_run: bool = False):
    """
    Remove the intermediate files of one job.

    Args:
        intermediate_dir: Directory holding the intermediate files
        job_name: Job identifier
        num_map: Number of map tasks
        num_reduce: Number of reduce buckets
        dry_run: If True, only report what would be deleted

    Returns:
        tuple: (files_deleted, bytes_freed)
    """
    files_deleted = 0
    bytes_freed = 0

    for map_task in range(num_map):
        for bucket in range(num_reduce):
            path = intermediate_name(job_name, map_task, bucket, intermediate_dir)
            candidates = [path] + glob.glob(glob.escape(path) + '.*.tmp')
            for candidate in candidates:
                if not os.path.isfile(candidate):
                    continue
                file_size = os.path.getsize(candidate)
                if dry_run:
                    logger.info(f"Would delete: {candidate} ({file_size} bytes)")
                else:
                    os.remove(candidate)
                files_deleted += 1
                bytes_freed += file_size

    return files_deleted, bytes_freed


def format_size(size_bytes: int) -> str:
    """Format bytes into human-readable size."""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.2f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.2f} TB"


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Remove a job's intermediate files before retrying its map phase",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --job wc --num-map 3 --num-reduce 2
  %(prog)s --job wc --num-map 3 --num-reduce 2 --dry-run
"""
    )
    parser.add_argument('--data-dir', type=str, help='Data directory (default: $MAPREDUCE_DATA_DIR)')
    parser.add_argument('--job', type=str, required=True, help='Job name')
    parser.add_argument('--num-map', type=int, required=True, help='Number of map tasks')
    parser.add_argument('--num-reduce', type=int, required=True, help='Number of reduce tasks')
    parser.add_argument('--dry-run', '-n', action='store_true',
                        help='Show what would be deleted without actually deleting')
    args = parser.parse_args(argv)

    settings = WorkerSettings.from_env()
    if args.data_dir:
        settings.data_dir = args.data_dir
    configure_logging(settings)

    files, bytes_freed = cleanup_intermediate(
        settings.intermediate_dir, args.job, args.num_map, args.num_reduce, dry_run=args.dry_run
    )
    if args.dry_run:
        logger.info(f"DRY RUN: Would delete {files} files ({format_size(bytes_freed)})")
    else:
        logger.info(f"Cleanup complete: {files} files deleted ({format_size(bytes_freed)})")
    return 0


if __name__ == '__main__':
    sys.exit(main())
