"""
Record Codec
Intermediate and output files hold one JSON object per line:
{"key": ..., "value": ...}
"""

import os
import json
import tempfile
from typing import Iterator, NamedTuple

from common.errors import InputUnreadableError, OutputUnwritableError, RecordDecodeError, RecordEncodeError


class KeyValue(NamedTuple):
    key: str
    value: str


def to_key_value(item) -> KeyValue:
    """
    Normalise a callback result item to a KeyValue

    Raises:
        RecordEncodeError: If the item is not a (str, str) pair
    """
    if isinstance(item, (str, bytes)):
        raise RecordEncodeError(f"Expected a (key, value) pair, got {item!r}")
    try:
        key, value = item
    except (TypeError, ValueError):
        raise RecordEncodeError(f"Expected a (key, value) pair, got {item!r}")

    if not isinstance(key, str) or not isinstance(value, str):
        raise RecordEncodeError(
            f"Record key and value must be strings, got ({type(key).__name__}, {type(value).__name__})"
        )
    return KeyValue(key, value)


def encode_record(kv) -> str:
    """Encode one record as a newline-terminated JSON line"""
    kv = to_key_value(kv)
    return json.dumps({'key': kv.key, 'value': kv.value}) + '\n'


def decode_record(line: str, path: str = None, line_number: int = None) -> KeyValue:
    """
    Decode one JSON line back into a KeyValue

    Raises:
        RecordDecodeError: If the line is not a well-formed record
    """
    try:
        record = json.loads(line)
    except json.JSONDecodeError as e:
        raise RecordDecodeError(f"Invalid JSON: {e}", path, line_number)

    if not isinstance(record, dict) or set(record) != {'key', 'value'}:
        raise RecordDecodeError("Expected an object with 'key' and 'value'", path, line_number)

    key, value = record['key'], record['value']
    if not isinstance(key, str) or not isinstance(value, str):
        raise RecordDecodeError("Record key and value must be strings", path, line_number)

    return KeyValue(key, value)


def read_records(path: str) -> Iterator[KeyValue]:
    """
    Stream the records of one file until end of file

    Args:
        path: Intermediate or output file

    Yields:
        KeyValue records in file order

    Raises:
        InputUnreadableError: If the file cannot be opened or read
        RecordDecodeError: On a malformed line
    """
    try:
        f = open(path, 'r', encoding='utf-8', newline='\n')
    except OSError as e:
        raise InputUnreadableError(f"Cannot open {path}: {e}") from e

    with f:
        line_number = 0
        while True:
            try:
                line = f.readline()
            except (OSError, UnicodeDecodeError) as e:
                raise InputUnreadableError(f"Cannot read {path}: {e}") from e
            if not line:
                return
            line_number += 1
            yield decode_record(line, path, line_number)


class RecordWriter:
    """
    Writes records to a temporary file next to `path` and renames it into
    place on commit(). Leaving the `with` block without commit() discards the
    temporary file, so a failed task never leaves a half-written target.
    """

    def __init__(self, path: str):
        self.path = path
        self.records_written = 0
        self._file = None
        self._tmp_path = None

    def open(self):
        directory = os.path.dirname(self.path) or '.'
        try:
            os.makedirs(directory, exist_ok=True)
            fd, self._tmp_path = tempfile.mkstemp(
                prefix=os.path.basename(self.path) + '.', suffix='.tmp', dir=directory
            )
            self._file = os.fdopen(fd, 'w', encoding='utf-8', newline='\n')
        except OSError as e:
            self.abort()
            raise OutputUnwritableError(f"Cannot create {self.path}: {e}") from e
        return self

    def write(self, kv):
        line = encode_record(kv)
        try:
            self._file.write(line)
        except OSError as e:
            raise OutputUnwritableError(f"Cannot write {self.path}: {e}") from e
        self.records_written += 1

    def finish(self):
        """Flush, fsync and close the temporary file without renaming it"""
        try:
            self._file.flush()
            os.fsync(self._file.fileno())
            self._file.close()
        except OSError as e:
            self.abort()
            raise OutputUnwritableError(f"Cannot finish {self.path}: {e}") from e
        self._file = None

    def publish(self):
        """Rename a finished temporary file onto the target path"""
        try:
            os.replace(self._tmp_path, self.path)
        except OSError as e:
            self.abort()
            raise OutputUnwritableError(f"Cannot commit {self.path}: {e}") from e
        self._tmp_path = None

    def commit(self):
        self.finish()
        self.publish()

    def abort(self):
        try:
            if self._file is not None:
                self._file.close()
        except OSError:
            pass
        finally:
            self._file = None
            if self._tmp_path is not None:
                try:
                    os.remove(self._tmp_path)
                except FileNotFoundError:
                    pass
                self._tmp_path = None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.abort()
        return False
