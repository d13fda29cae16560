"""
Inverted index MapReduce example.
Creates an index mapping each word to the documents it appears in.
"""

import re

WORD_RE = re.compile(r"[^\W\d_]+")


def map_function(filename, contents):
    """
    Map function: emit (word, filename) once per distinct word.

    Args:
        filename: Input file name, used as the document ID
        contents: Whole input file as text

    Yields:
        (word, filename) tuples
    """
    for word in sorted(set(w.lower() for w in WORD_RE.findall(contents))):
        yield (word, filename)


def reduce_function(key, values):
    """
    Reduce function: collect all document IDs for a word.

    Values may already be comma-joined by the combiner.

    Returns:
        Sorted, comma-separated unique document IDs
    """
    docs = set()
    for value in values:
        docs.update(value.split(','))
    return ','.join(sorted(docs))


def combiner_function(key, values):
    """Combiner function: remove local duplicates."""
    return reduce_function(key, values)
