"""
Population-level accumulation of per-gene, two-class codon weight statistics.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple
import numpy as np
import pandas as pd
from scipy.stats import wilcoxon
import logging

logger = logging.getLogger(__name__)


class RunningStats:
    """
    Count, mean and sample standard deviation of a stream of values
    (Welford's algorithm).
    """

    def __init__(self, values: Iterable[float] = ()):
        self.count = 0
        self._mean = 0.0
        self._m2 = 0.0
        for value in values:
            self.add(value)

    def add(self, value: float) -> None:
        self.count += 1
        delta = value - self._mean
        self._mean += delta / self.count
        self._m2 += delta * (value - self._mean)

    @property
    def mean(self) -> float:
        return self._mean if self.count else math.nan

    @property
    def variance(self) -> float:
        if self.count == 0:
            return math.nan
        if self.count == 1:
            return 0.0
        return self._m2 / (self.count - 1)

    @property
    def std(self) -> float:
        return math.sqrt(self.variance)

    def __repr__(self) -> str:
        return f"RunningStats(count={self.count}, mean={self.mean:.4f}, std={self.std:.4f})"


@dataclass
class Evaluation:
    """
    Append-only record of one (positive, negative) statistics pair per gene.

    Aggregates are statistics of per-gene statistics, so every gene weighs
    the same regardless of its length. A gene whose class was empty
    contributes NaN to that class and is ignored by the aggregates.
    """

    positive_label: str = 'positive'
    negative_label: str = 'negative'
    requested_count: int = 0
    gene_ids: List[str] = field(default_factory=list)
    pairs: List[Tuple[RunningStats, RunningStats]] = field(default_factory=list)
    skipped: Dict[str, str] = field(default_factory=dict)

    def add(self, gene_id: str, positive: RunningStats, negative: RunningStats) -> None:
        self.gene_ids.append(gene_id)
        self.pairs.append((positive, negative))

    def skip(self, gene_id: str, reason: str) -> None:
        self.skipped[gene_id] = reason

    @property
    def processed_count(self) -> int:
        return len(self.pairs)

    def __len__(self) -> int:
        return len(self.pairs)

    def positive_means(self) -> np.ndarray:
        return np.array([positive.mean for positive, _ in self.pairs], dtype=float)

    def negative_means(self) -> np.ndarray:
        return np.array([negative.mean for _, negative in self.pairs], dtype=float)

    def positive_standard_deviations(self) -> np.ndarray:
        return np.array([positive.std for positive, _ in self.pairs], dtype=float)

    def negative_standard_deviations(self) -> np.ndarray:
        return np.array([negative.std for _, negative in self.pairs], dtype=float)

    @property
    def mean_positive_mean(self) -> float:
        return _nanmean(self.positive_means())

    @property
    def mean_negative_mean(self) -> float:
        return _nanmean(self.negative_means())

    @property
    def mean_positive_sd(self) -> float:
        return _nanmean(self.positive_standard_deviations())

    @property
    def mean_negative_sd(self) -> float:
        return _nanmean(self.negative_standard_deviations())

    def paired_test(self) -> Tuple[float, float]:
        """
        Wilcoxon signed-rank test of per-gene positive vs negative means.

        Genes missing either class are left out.

        Returns:
            (statistic, p_value), NaN when fewer than two complete genes or
            when every difference is zero
        """
        positive = self.positive_means()
        negative = self.negative_means()
        complete = ~(np.isnan(positive) | np.isnan(negative))
        differences = positive[complete] - negative[complete]

        if len(differences) < 2 or np.allclose(differences, 0):
            return math.nan, math.nan

        try:
            stat, p_value = wilcoxon(positive[complete], negative[complete])
        except ValueError as e:
            logger.warning(f"Wilcoxon test failed: {e}")
            return math.nan, math.nan

        return float(stat), float(p_value)

    def summary(self) -> Dict[str, float]:
        """Get summary statistics as a flat dictionary."""
        stat, p_value = self.paired_test()
        return {
            'requested_genes': self.requested_count,
            'processed_genes': self.processed_count,
            'skipped_genes': len(self.skipped),
            f'mean_{self.positive_label}_mean': self.mean_positive_mean,
            f'mean_{self.negative_label}_mean': self.mean_negative_mean,
            f'mean_{self.positive_label}_sd': self.mean_positive_sd,
            f'mean_{self.negative_label}_sd': self.mean_negative_sd,
            'wilcoxon_statistic': stat,
            'wilcoxon_p_value': p_value
        }

    def to_dataframe(self) -> pd.DataFrame:
        """
        Get per-gene statistics.

        Returns:
            DataFrame with columns: gene_id, class, n, mean, sd
        """
        rows = []
        for gene_id, (positive, negative) in zip(self.gene_ids, self.pairs):
            for label, stats in ((self.positive_label, positive), (self.negative_label, negative)):
                rows.append({
                    'gene_id': gene_id,
                    'class': label,
                    'n': stats.count,
                    'mean': stats.mean,
                    'sd': stats.std
                })
        return pd.DataFrame(rows, columns=['gene_id', 'class', 'n', 'mean', 'sd'])


def _nanmean(values: np.ndarray) -> float:
    values = values[~np.isnan(values)]
    if len(values) == 0:
        return math.nan
    return float(values.mean())
