"""
Task Logging
Each executor call gets its own logger so output is scoped to one task
"""

import logging

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class TaskLoggerAdapter(logging.LoggerAdapter):
    """Prefixes every message with '<job> <phase> task <n>: '"""

    def process(self, msg, kwargs):
        extra = self.extra
        return f"{extra['job_name']} {extra['phase']} task {extra['task']}: {msg}", kwargs


def get_task_logger(phase: str, job_name: str, task: int, base_logger: logging.Logger = None):
    """
    Create a logger for one task invocation

    Args:
        phase: 'map' or 'reduce'
        job_name: Job identifier
        task: Map or reduce task index
        base_logger: Logger to wrap (default: the executor module's logger)
    """
    if base_logger is None:
        base_logger = logging.getLogger(f"worker.{phase}_executor")
    return TaskLoggerAdapter(base_logger, {'job_name': job_name, 'phase': phase, 'task': task})


def configure_logging(settings):
    """Process-level logging setup for the command-line scripts"""
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
