"""
End-to-end tests
Runs whole jobs in-process: every map task, then every reduce task, the way
a scheduler would drive the workers across the phase barrier
"""

import os
import re
from collections import Counter, defaultdict

import pytest

from common.naming import output_name
from common.records import read_records
from worker.map_executor import MapExecutor, run_map_task
from worker.reduce_executor import ReduceExecutor, run_reduce_task

DOCUMENTS = [
    "the quick brown fox\nthe lazy dog\n",
    "the fox jumps over the dog\n",
    "Quick quick QUICK\n",
    "",
]


@pytest.fixture
def input_files(temp_dir):
    paths = []
    for i, text in enumerate(DOCUMENTS):
        path = os.path.join(temp_dir, f"doc-{i}.txt")
        with open(path, 'w') as f:
            f.write(text)
        paths.append(path)
    return paths


def expected_word_counts():
    counts = Counter()
    for text in DOCUMENTS:
        counts.update(w.lower() for w in re.findall(r"[^\W\d_]+", text))
    return counts


def run_job(job_name, input_files, num_reduce, job_file, temp_dir, use_combiner=False):
    intermediate_dir = os.path.join(temp_dir, 'intermediate')
    output_dir = os.path.join(temp_dir, 'output')

    for task_id, path in enumerate(input_files):
        result = MapExecutor(job_name, task_id, path, num_reduce, job_file,
                             use_combiner=use_combiner, intermediate_dir=intermediate_dir).execute()
        assert result['success'] is True, result['error_message']

    outputs = []
    for task_id in range(num_reduce):
        result = ReduceExecutor(job_name, task_id, len(input_files), job_file,
                                output_path=output_name(job_name, task_id, output_dir),
                                intermediate_dir=intermediate_dir).execute()
        assert result['success'] is True, result['error_message']
        outputs.extend(result['files'])
    return outputs


@pytest.mark.integration
class TestWordCountCorrectness:
    """Tests for word count correctness"""

    @pytest.mark.parametrize('num_reduce', [1, 2, 5])
    def test_wordcount_produces_correct_counts(self, input_files, wordcount_job_file, temp_dir, num_reduce):
        outputs = run_job('wc', input_files, num_reduce, wordcount_job_file, temp_dir)

        counts = {}
        for path in outputs:
            keys = [kv.key for kv in read_records(path)]
            assert keys == sorted(keys)
            assert len(keys) == len(set(keys))
            for kv in read_records(path):
                assert kv.key not in counts
                counts[kv.key] = int(kv.value)

        assert counts == dict(expected_word_counts())

    def test_combiner_does_not_change_result(self, input_files, wordcount_job_file, temp_dir):
        plain = run_job('plain', input_files, 3, wordcount_job_file, os.path.join(temp_dir, 'a'))
        combined = run_job('combined', input_files, 3, wordcount_job_file, os.path.join(temp_dir, 'b'),
                           use_combiner=True)

        for p, c in zip(plain, combined):
            assert list(read_records(p)) == list(read_records(c))

    def test_rerunning_whole_job_is_idempotent(self, input_files, wordcount_job_file, temp_dir):
        first = run_job('wc', input_files, 2, wordcount_job_file, temp_dir)
        first_bytes = [open(p, 'rb').read() for p in first]

        second = run_job('wc', input_files, 2, wordcount_job_file, temp_dir)

        assert [open(p, 'rb').read() for p in second] == first_bytes


@pytest.mark.integration
class TestInvertedIndex:

    def test_index_lists_every_document_per_word(self, input_files, inverted_index_job_file, temp_dir):
        outputs = run_job('ii', input_files, 2, inverted_index_job_file, temp_dir, use_combiner=True)

        index = {}
        for path in outputs:
            for kv in read_records(path):
                index[kv.key] = kv.value.split(',')

        assert index['fox'] == [input_files[0], input_files[1]]
        assert index['quick'] == [input_files[0], input_files[2]]
        assert index['jumps'] == [input_files[1]]


@pytest.mark.integration
def test_example_scenario(temp_dir, word_map, sum_reduce):
    input_path = os.path.join(temp_dir, 'input.txt')
    with open(input_path, 'w') as f:
        f.write('a b a')
    intermediate_dir = os.path.join(temp_dir, 'intermediate')

    run_map_task('example', 0, input_path, 2, word_map, intermediate_dir=intermediate_dir)
    out0 = run_reduce_task('example', 0, os.path.join(temp_dir, 'out-0'), 1, sum_reduce,
                           intermediate_dir=intermediate_dir)
    out1 = run_reduce_task('example', 1, os.path.join(temp_dir, 'out-1'), 1, sum_reduce,
                           intermediate_dir=intermediate_dir)

    assert [tuple(kv) for kv in read_records(out0)] == [('a', '2')]
    assert [tuple(kv) for kv in read_records(out1)] == [('b', '1')]


@pytest.mark.integration
def test_reduce_groups_across_many_map_tasks(temp_dir, sum_reduce):
    intermediate_dir = os.path.join(temp_dir, 'intermediate')
    num_map, num_reduce = 6, 4
    emitted = defaultdict(int)

    for m in range(num_map):
        path = os.path.join(temp_dir, f"in-{m}")
        with open(path, 'w') as f:
            f.write('')
        records = [(f"key{(m * 7 + i) % 13}", str(i)) for i in range(20)]
        for key, value in records:
            emitted[key] += int(value)
        run_map_task('many', m, path, num_reduce, lambda filename, contents, r=records: r,
                     intermediate_dir=intermediate_dir)

    reduced = {}
    for r in range(num_reduce):
        out = run_reduce_task('many', r, os.path.join(temp_dir, f"out-{r}"), num_map, sum_reduce,
                              intermediate_dir=intermediate_dir)
        for kv in read_records(out):
            assert kv.key not in reduced
            reduced[kv.key] = int(kv.value)

    assert reduced == dict(emitted)
