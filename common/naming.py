"""
Intermediate File Naming
Both executors, and any cleanup tooling, locate files through these functions
"""

import os

PREFIX = 'mrtmp.'


def _check_job_name(job_name: str):
    if not job_name:
        raise ValueError("job_name must not be empty")
    if os.sep in job_name or (os.altsep and os.altsep in job_name):
        raise ValueError(f"job_name must not contain a path separator: {job_name!r}")


def _check_index(name: str, value: int):
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}")


def _join(base_dir, filename):
    return os.path.join(base_dir, filename) if base_dir else filename


def intermediate_name(job_name: str, map_task: int, reduce_task: int, base_dir: str = None) -> str:
    """
    Path of the file map task `map_task` writes for bucket `reduce_task`

    Args:
        job_name: Job identifier
        map_task: Index of the producing map task
        reduce_task: Bucket / reduce task index
        base_dir: Optional directory to place the file in

    Returns:
        Path string, e.g. 'mrtmp.wc-0-1'
    """
    _check_job_name(job_name)
    _check_index('map_task', map_task)
    _check_index('reduce_task', reduce_task)
    return _join(base_dir, f"{PREFIX}{job_name}-{map_task}-{reduce_task}")


def output_name(job_name: str, reduce_task: int, base_dir: str = None) -> str:
    """Path of the final output file of one reduce task"""
    _check_job_name(job_name)
    _check_index('reduce_task', reduce_task)
    return _join(base_dir, f"{PREFIX}{job_name}-res-{reduce_task}")


def intermediate_names_for_map(job_name: str, map_task: int, num_reduce: int, base_dir: str = None) -> list:
    """All files one map task produces, in bucket order"""
    return [intermediate_name(job_name, map_task, r, base_dir) for r in range(num_reduce)]


def intermediate_names_for_reduce(job_name: str, reduce_task: int, num_map: int, base_dir: str = None) -> list:
    """All files one reduce task consumes, in map-task order"""
    return [intermediate_name(job_name, m, reduce_task, base_dir) for m in range(num_map)]


def parse_intermediate_name(path: str) -> tuple:
    """
    Recover (job_name, map_task, reduce_task) from an intermediate file path

    The two indices are split off from the right, so job names containing
    '-' still parse unambiguously.

    Raises:
        ValueError: If the path is not an intermediate file name
    """
    filename = os.path.basename(path)
    if not filename.startswith(PREFIX):
        raise ValueError(f"Not an intermediate file name: {path}")

    parts = filename[len(PREFIX):].rsplit('-', 2)
    if len(parts) != 3 or not parts[0] or not parts[1].isdigit() or not parts[2].isdigit():
        raise ValueError(f"Not an intermediate file name: {path}")

    return parts[0], int(parts[1]), int(parts[2])
