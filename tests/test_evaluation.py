"""Tests for running statistics and population-level evaluations."""

import math

import numpy as np
import pytest

from codon_structure.analysis.evaluation import Evaluation, RunningStats


class TestRunningStats:
    def test_mean_and_sample_std(self):
        stats = RunningStats([1.0, 2.0, 3.0, 4.0])
        assert stats.count == 4
        assert stats.mean == pytest.approx(2.5)
        assert stats.std == pytest.approx(np.std([1, 2, 3, 4], ddof=1))

    def test_single_value(self):
        stats = RunningStats([0.7])
        assert stats.mean == pytest.approx(0.7)
        assert stats.std == 0.0

    def test_empty(self):
        stats = RunningStats()
        assert stats.count == 0
        assert math.isnan(stats.mean)
        assert math.isnan(stats.std)

    def test_incremental_matches_batch(self):
        values = np.random.default_rng(2).uniform(0, 3, size=500)
        stats = RunningStats()
        for value in values:
            stats.add(value)
        assert stats.mean == pytest.approx(values.mean())
        assert stats.variance == pytest.approx(values.var(ddof=1))


def _evaluation(*pairs):
    evaluation = Evaluation(positive_label="pos", negative_label="neg",
                            requested_count=len(pairs))
    for n, (positive, negative) in enumerate(pairs):
        evaluation.add(f"g{n}", RunningStats(positive), RunningStats(negative))
    return evaluation


class TestEvaluation:
    def test_aggregates_are_means_of_per_gene_statistics(self):
        evaluation = _evaluation(([1.0, 3.0], [1.0]), ([2.0], [0.0, 2.0, 4.0]))
        np.testing.assert_allclose(evaluation.positive_means(), [2.0, 2.0])
        np.testing.assert_allclose(evaluation.negative_means(), [1.0, 2.0])
        assert evaluation.mean_positive_mean == pytest.approx(2.0)
        assert evaluation.mean_negative_mean == pytest.approx(1.5)
        assert evaluation.mean_positive_sd == pytest.approx(math.sqrt(2) / 2)
        assert evaluation.mean_negative_sd == pytest.approx(1.0)

    def test_empty_class_is_ignored(self):
        evaluation = _evaluation(([], [1.0, 1.0]), ([2.0], [1.0]))
        assert math.isnan(evaluation.positive_means()[0])
        assert evaluation.mean_positive_mean == pytest.approx(2.0)
        assert evaluation.mean_negative_mean == pytest.approx(1.0)

    def test_empty_evaluation(self):
        evaluation = Evaluation()
        assert len(evaluation) == 0
        assert math.isnan(evaluation.mean_positive_mean)
        assert all(math.isnan(v) for v in evaluation.paired_test())

    def test_skips_are_recorded(self):
        evaluation = _evaluation(([1.0], [1.0]))
        evaluation.requested_count = 2
        evaluation.skip("g9", "no structure")
        assert evaluation.processed_count == 1
        assert evaluation.skipped == {"g9": "no structure"}
        assert evaluation.summary()["skipped_genes"] == 1

    def test_paired_test(self):
        pairs = [([1.2 + 0.1 * n], [1.0]) for n in range(8)]
        stat, p_value = _evaluation(*pairs).paired_test()
        assert p_value < 0.05

    def test_paired_test_needs_two_genes(self):
        assert all(math.isnan(v) for v in _evaluation(([1.0], [2.0])).paired_test())

    def test_summary_keys_use_labels(self):
        summary = _evaluation(([1.0], [2.0])).summary()
        assert summary["mean_pos_mean"] == pytest.approx(1.0)
        assert summary["mean_neg_mean"] == pytest.approx(2.0)
        assert summary["processed_genes"] == 1

    def test_to_dataframe(self):
        df = _evaluation(([1.0, 3.0], [1.0])).to_dataframe()
        assert list(df.columns) == ["gene_id", "class", "n", "mean", "sd"]
        assert df["class"].tolist() == ["pos", "neg"]
        assert df["n"].tolist() == [2, 1]
