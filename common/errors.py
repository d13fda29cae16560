"""
Task Errors
Error kinds that abort a map or reduce task
"""


class TaskError(Exception):
    """Base class for task-fatal errors"""

    kind = 'task_error'


class InputUnreadableError(TaskError):
    """An input split or intermediate file could not be opened or read"""

    kind = 'input_unreadable'


class OutputUnwritableError(TaskError):
    """An intermediate or output file could not be created or written"""

    kind = 'output_unwritable'


class RecordEncodeError(TaskError):
    """A record could not be serialized"""

    kind = 'encode_failure'


class RecordDecodeError(TaskError):
    """A stored record stream is malformed before its end"""

    kind = 'decode_failure'

    def __init__(self, message: str, path: str = None, line_number: int = None):
        if path is not None:
            message = f"{path}:{line_number}: {message}"
        super().__init__(message)
        self.path = path
        self.line_number = line_number


class InvalidTaskError(TaskError, ValueError):
    """Task arguments violate the executor contract"""

    kind = 'invalid_argument'
