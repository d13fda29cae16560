#!/usr/bin/env python3
"""
Map Task Executor
Executes map tasks by reading an input file, applying the map function,
partitioning output into reduce buckets, and writing intermediate files
"""

import time
from collections import defaultdict

import psutil

from common.errors import InputUnreadableError, InvalidTaskError, TaskError
from common.naming import intermediate_names_for_map
from common.partition import partition_for
from common.records import RecordWriter, to_key_value
from worker.function_loader import FunctionLoader
from worker.settings import WorkerSettings
from worker.task_logging import get_task_logger


def run_map_task(job_name: str, map_task: int, input_path: str, num_reduce: int, map_fn,
                 combine_fn=None, intermediate_dir: str = None, logger=None) -> list:
    """
    Run one map task

    Args:
        job_name: Job identifier shared by all tasks of the job
        map_task: Index of this map task
        input_path: Input file assigned to this task
        num_reduce: Number of reduce buckets
        map_fn: map_fn(filename, contents) -> iterable of (key, value)
        combine_fn: Optional combine_fn(key, values) -> str applied per bucket
        intermediate_dir: Directory for intermediate files (default: from settings)
        logger: Task-scoped logger (default: get_task_logger('map', ...))

    Returns:
        Intermediate file paths, one per bucket, in bucket order

    Raises:
        InvalidTaskError: On invalid task arguments
        TaskError: On unreadable input, encode failure or unwritable output
    """
    if num_reduce < 1:
        raise InvalidTaskError(f"num_reduce must be >= 1, got {num_reduce}")
    if intermediate_dir is None:
        intermediate_dir = WorkerSettings.from_env().intermediate_dir
    if logger is None:
        logger = get_task_logger('map', job_name, map_task)

    try:
        paths = intermediate_names_for_map(job_name, map_task, num_reduce, intermediate_dir)
    except ValueError as e:
        raise InvalidTaskError(str(e)) from e

    logger.info(f"Reading input {input_path}")
    contents = _read_input(input_path)

    buckets = defaultdict(list)
    emitted = 0
    for item in map_fn(input_path, contents):
        kv = to_key_value(item)
        buckets[partition_for(kv.key, num_reduce)].append(kv)
        emitted += 1
    logger.info(f"Map function emitted {emitted} records")

    if combine_fn is not None:
        buckets = {bucket: _combine(kvs, combine_fn) for bucket, kvs in buckets.items()}
        logger.info(f"After combiner: {sum(len(kvs) for kvs in buckets.values())} records")

    _write_buckets(paths, buckets)
    logger.info(f"Wrote {num_reduce} intermediate files")
    return paths


def _read_input(input_path: str) -> str:
    try:
        with open(input_path, 'r', encoding='utf-8', errors='replace') as f:
            return f.read()
    except OSError as e:
        raise InputUnreadableError(f"Cannot read input {input_path}: {e}") from e


def _combine(kvs: list, combine_fn) -> list:
    key_groups = defaultdict(list)
    for key, value in kvs:
        key_groups[key].append(value)
    return [to_key_value((key, combine_fn(key, values))) for key, values in key_groups.items()]


def _write_buckets(paths: list, buckets: dict):
    # Every bucket gets a file, even when empty. At most one file is open at a
    # time; targets are only replaced once every bucket has been written.
    writers = []
    try:
        for bucket, path in enumerate(paths):
            writer = RecordWriter(path)
            writers.append(writer)
            writer.open()
            for kv in buckets.get(bucket, ()):
                writer.write(kv)
            writer.finish()
        for writer in writers:
            writer.publish()
    finally:
        for writer in writers:
            writer.abort()


class MapExecutor:
    """Executes a single map task"""

    def __init__(self, job_name: str, task_id: int, input_path: str, num_reduce_tasks: int,
                 map_reduce_file: str, use_combiner: bool = False, intermediate_dir: str = None,
                 logger=None):
        """
        Initialize the map executor

        Args:
            job_name: Job identifier
            task_id: Index of this map task
            input_path: Path to input file
            num_reduce_tasks: Number of reduce tasks (for partitioning)
            map_reduce_file: Path to user's map/reduce Python file
            use_combiner: Whether to apply combiner function
            intermediate_dir: Directory for intermediate files
            logger: Optional task-scoped logger
        """
        self.job_name = job_name
        self.task_id = task_id
        self.input_path = input_path
        self.num_reduce_tasks = num_reduce_tasks
        self.map_reduce_file = map_reduce_file
        self.use_combiner = use_combiner
        self.intermediate_dir = intermediate_dir
        self.logger = logger or get_task_logger('map', job_name, task_id)
        self.loader = FunctionLoader(map_reduce_file)

    def execute(self) -> dict:
        """
        Execute the map task

        Returns:
            Dictionary with 'success', 'execution_time_ms', 'error_message',
            'error_kind', 'files' and 'memory_rss_bytes' fields
        """
        start_time = time.time()
        files = []
        error_message = ''
        error_kind = ''
        stage = 'job_file'

        try:
            map_func = self.loader.get_map_function()
            combine_func = self.loader.get_combiner_function() if self.use_combiner else None

            stage = 'user_function'
            files = run_map_task(
                self.job_name, self.task_id, self.input_path, self.num_reduce_tasks, map_func,
                combine_fn=combine_func, intermediate_dir=self.intermediate_dir, logger=self.logger,
            )
        except TaskError as e:
            error_kind, error_message = e.kind, str(e)
        except Exception as e:
            error_kind, error_message = stage, str(e)

        execution_time = int((time.time() - start_time) * 1000)
        if error_kind:
            self.logger.error(f"Failed ({error_kind}): {error_message}")
        else:
            self.logger.info(f"Completed in {execution_time}ms")

        return {
            'success': not error_kind,
            'execution_time_ms': execution_time,
            'error_message': error_message,
            'error_kind': error_kind,
            'files': files,
            'memory_rss_bytes': psutil.Process().memory_info().rss,
        }
