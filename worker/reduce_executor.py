#!/usr/bin/env python3
"""
Reduce Task Executor
Executes reduce tasks by reading one bucket's intermediate file from every
map task, grouping by key, applying the reduce function, and writing final
output
"""

import time
from collections import defaultdict

import psutil

from common.errors import InvalidTaskError, RecordEncodeError, TaskError
from common.naming import intermediate_names_for_reduce, output_name
from common.records import KeyValue, RecordWriter, read_records
from worker.function_loader import FunctionLoader
from worker.settings import WorkerSettings
from worker.task_logging import get_task_logger


def run_reduce_task(job_name: str, reduce_task: int, output_path: str, num_map: int, reduce_fn,
                    intermediate_dir: str = None, logger=None) -> str:
    """
    Run one reduce task

    Args:
        job_name: Job identifier shared by all tasks of the job
        reduce_task: Bucket index this task reduces
        output_path: Final output file
        num_map: Number of map tasks that ran for the job
        reduce_fn: reduce_fn(key, values) -> str
        intermediate_dir: Directory holding intermediate files (default: from settings)
        logger: Task-scoped logger (default: get_task_logger('reduce', ...))

    Returns:
        output_path, once the output has been committed

    Raises:
        InvalidTaskError: On invalid task arguments
        TaskError: On missing/unreadable intermediate files, decode or encode
            failure, or unwritable output. No output file is created then.
    """
    if num_map < 1:
        raise InvalidTaskError(f"num_map must be >= 1, got {num_map}")
    if intermediate_dir is None:
        intermediate_dir = WorkerSettings.from_env().intermediate_dir
    if logger is None:
        logger = get_task_logger('reduce', job_name, reduce_task)

    try:
        paths = intermediate_names_for_reduce(job_name, reduce_task, num_map, intermediate_dir)
    except ValueError as e:
        raise InvalidTaskError(str(e)) from e

    key_groups = read_and_group(paths)
    logger.info(f"Grouped {len(key_groups)} unique keys from {num_map} intermediate files")

    logger.info(f"Applying reduce function and writing output to {output_path}")
    with RecordWriter(output_path) as writer:
        for key in sorted(key_groups):
            reduced = reduce_fn(key, key_groups[key])
            if not isinstance(reduced, str):
                raise RecordEncodeError(
                    f"Reduce function must return a string for key {key!r}, got {type(reduced).__name__}"
                )
            writer.write(KeyValue(key, reduced))
        writer.commit()

    logger.info(f"Wrote {writer.records_written} records")
    return output_path


def read_and_group(paths: list) -> dict:
    """
    Read intermediate files and group values by key

    Values keep arrival order: file order first, then line order.

    Returns:
        Dictionary mapping key to list of values
    """
    key_groups = defaultdict(list)
    for path in paths:
        for key, value in read_records(path):
            key_groups[key].append(value)
    return key_groups


class ReduceExecutor:
    """Executes a single reduce task"""

    def __init__(self, job_name: str, task_id: int, num_map_tasks: int, map_reduce_file: str,
                 output_path: str = None, intermediate_dir: str = None, logger=None):
        """
        Initialize the reduce executor

        Args:
            job_name: Job identifier
            task_id: Bucket index this reduce task is responsible for
            num_map_tasks: Number of map tasks in the job
            map_reduce_file: Path to user's map/reduce Python file
            output_path: Output file (default: output_name() in the settings output dir)
            intermediate_dir: Directory holding intermediate files
            logger: Optional task-scoped logger
        """
        self.job_name = job_name
        self.task_id = task_id
        self.num_map_tasks = num_map_tasks
        self.map_reduce_file = map_reduce_file
        self.output_path = output_path
        self.intermediate_dir = intermediate_dir
        self.logger = logger or get_task_logger('reduce', job_name, task_id)
        self.loader = FunctionLoader(map_reduce_file)

    def execute(self) -> dict:
        """
        Execute the reduce task

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
            reduce_func = self.loader.get_reduce_function()

            stage = 'invalid_argument'
            output_path = self.output_path
            if output_path is None:
                output_path = output_name(self.job_name, self.task_id, WorkerSettings.from_env().output_dir)

            stage = 'user_function'
            files = [run_reduce_task(
                self.job_name, self.task_id, output_path, self.num_map_tasks, reduce_func,
                intermediate_dir=self.intermediate_dir, logger=self.logger,
            )]
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
