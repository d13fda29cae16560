"""
Classic MapReduce word count example.
Counts the frequency of each word in the input file.
"""

import re

WORD_RE = re.compile(r"[^\W\d_]+")


def map_function(filename, contents):
    """
    Map function: emit (word, "1") for each word in the file.

    Args:
        filename: Input file name (unused)
        contents: Whole input file as text

    Yields:
        (word, "1") tuples
    """
    for word in WORD_RE.findall(contents):
        yield (word.lower(), "1")


def reduce_function(key, values):
    """
    Reduce function: sum all counts for a word.

    Args:
        key: Word
        values: Counts as strings, "1" from map or partial sums from the combiner

    Returns:
        Total count as a string
    """
    return str(sum(int(v) for v in values))
