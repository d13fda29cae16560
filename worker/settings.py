"""
Worker Settings
Environment-driven configuration for the task executors
"""

import os
from dataclasses import dataclass


@dataclass
class WorkerSettings:
    data_dir: str = '/mapreduce-data'
    log_level: str = 'INFO'

    @property
    def intermediate_dir(self) -> str:
        return os.path.join(self.data_dir, 'intermediate')

    @property
    def output_dir(self) -> str:
        return os.path.join(self.data_dir, 'output')

    @classmethod
    def from_env(cls, environ=None) -> 'WorkerSettings':
        """
        Build settings from environment variables

        Args:
            environ: Mapping to read from (default: os.environ)

        Returns:
            WorkerSettings with MAPREDUCE_DATA_DIR and MAPREDUCE_LOG_LEVEL applied
        """
        environ = os.environ if environ is None else environ
        return cls(
            data_dir=environ.get('MAPREDUCE_DATA_DIR', cls.data_dir),
            log_level=environ.get('MAPREDUCE_LOG_LEVEL', cls.log_level).upper(),
        )
