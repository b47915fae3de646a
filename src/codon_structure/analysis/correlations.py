"""
Correlation engine: relates codon weights to structural features of the
proteins they encode.

Two kinds of analysis are supported:

- classification: residues of each gene are split into a positive and a
  negative class (near a domain boundary or not, inside a beta sheet or
  not) and the codon weights of each class are summarized per gene into an
  :class:`Evaluation`;
- scalar correlation: one feature value per gene (length, sparseness, or
  any function) is paired with the gene's total codon weight.

Genes are processed one at a time in list order. A failure for one gene is
logged and the gene is skipped; it never aborts the batch.
"""

import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple
import numpy as np
import pandas as pd
from scipy.stats import pearsonr
import logging

from .alignment import aligned_weights, check_frame_consistency
from .codon_weights import CodonWeightTable
from .evaluation import Evaluation, RunningStats
from .geometry import sparseness
from ..exceptions import AnalysisError, CodonStructureError
from ..models import ProteinStructure, Residue, ResidueKey
from ..parsers.sequence_parser import load_gene_list
from ..sources.base import StructuralDataSource

FRAME_POLICIES = ('warn', 'skip')

FeatureFunction = Callable[[ProteinStructure, Sequence[Residue], str], float]


def residue_count(index_a: int, index_b: int) -> int:
    """Number of residues from index_a to index_b, both included."""
    return abs(index_a - index_b) + 1


def length_feature(structure: ProteinStructure, residues: Sequence[Residue], sequence: str) -> float:
    """Number of residues in the structure."""
    return float(len(residues))


def sparseness_feature(structure: ProteinStructure, residues: Sequence[Residue], sequence: str) -> float:
    """Mean distance from each C-alpha atom to its closest other C-alpha atom."""
    coords = np.vstack([residue.coord for residue in residues]) if residues else np.empty((0, 3))
    return sparseness(coords, coords, exclude_self=True)


FEATURES: Dict[str, FeatureFunction] = {
    'length': length_feature,
    'sparseness': sparseness_feature,
}


@dataclass
class CorrelationResult:
    """Feature values and total codon weights of the genes that succeeded, index-aligned."""

    feature_name: str
    requested_count: int = 0
    gene_ids: List[str] = field(default_factory=list)
    feature_values: List[float] = field(default_factory=list)
    total_weights: List[float] = field(default_factory=list)
    skipped: Dict[str, str] = field(default_factory=dict)

    def add(self, gene_id: str, feature_value: float, total_weight: float) -> None:
        self.gene_ids.append(gene_id)
        self.feature_values.append(feature_value)
        self.total_weights.append(total_weight)

    def __len__(self) -> int:
        return len(self.gene_ids)

    @property
    def processed_count(self) -> int:
        return len(self.gene_ids)

    def pearson(self) -> Tuple[float, float]:
        """
        Pearson correlation between feature values and total codon weights.

        Returns:
            (r, p_value); NaN when fewer than three genes or a constant vector
        """
        x = np.asarray(self.feature_values, dtype=float)
        y = np.asarray(self.total_weights, dtype=float)
        if len(x) < 3 or np.ptp(x) == 0 or np.ptp(y) == 0:
            return math.nan, math.nan

        r, p_value = pearsonr(x, y)
        return float(r), float(p_value)

    def summary(self) -> Dict[str, float]:
        r, p_value = self.pearson()
        return {
            'feature': self.feature_name,
            'requested_genes': self.requested_count,
            'processed_genes': self.processed_count,
            'skipped_genes': len(self.skipped),
            'pearson_r': r,
            'pearson_p_value': p_value
        }

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame({
            'gene_id': self.gene_ids,
            self.feature_name: self.feature_values,
            'total_codon_weight': self.total_weights
        })


class CorrelationEngine:
    """
    Runs classification and correlation analyses over a list of genes.

    Args:
        weights: Codon weight table, shared read-only
        source: Data source for sequences, structures and annotations
        gene_ids: Genes to analyze; may also be set later with set_genes
        logger: Logger for progress and per-gene failures
        frame_policy: What to do when sequence length != 3 x residue count:
            'warn' logs the mismatch and uses the partial alignment,
            'skip' excludes the gene
    """

    def __init__(self,
                 weights: CodonWeightTable,
                 source: StructuralDataSource,
                 gene_ids: Optional[List[str]] = None,
                 logger: Optional[logging.Logger] = None,
                 frame_policy: str = 'warn'):
        if frame_policy not in FRAME_POLICIES:
            raise ValueError(f"frame_policy must be one of {FRAME_POLICIES}, got {frame_policy!r}")

        self.weights = weights
        self.source = source
        self.logger = logger or logging.getLogger(__name__)
        self.frame_policy = frame_policy
        self.gene_ids: Optional[List[str]] = list(gene_ids) if gene_ids is not None else None

    def set_genes(self, gene_ids: List[str]) -> None:
        """Set the genes to run on. Must be called before any evaluation."""
        self.gene_ids = list(gene_ids)

    def set_genes_from_file(self, file_path: str) -> None:
        """Set the genes to run on from a line-by-line list file."""
        self.gene_ids = load_gene_list(file_path)

    def _require_genes(self) -> List[str]:
        if self.gene_ids is None:
            raise AnalysisError("Must set gene identifiers before running an analysis")
        return self.gene_ids

    def _check_frame(self, gene_id: str, structure: ProteinStructure, sequence: str) -> None:
        if check_frame_consistency(len(structure), len(sequence)):
            return

        message = (f"Gene {gene_id}: sequence of {len(sequence)} nt does not match "
                   f"{len(structure)} residues")
        if self.frame_policy == 'skip':
            raise AnalysisError(message)
        self.logger.warning(message)

    def _run_batch(self, genes: List[str], record_skip: Callable[[str, str], None],
                   process: Callable[[str], None]) -> None:
        for n, gene_id in enumerate(genes, 1):
            self.logger.debug(f"Processing gene {gene_id} ({n}/{len(genes)})")
            try:
                process(gene_id)
            except CodonStructureError as e:
                self.logger.info(f"Skipping {gene_id}: {e}")
                record_skip(gene_id, str(e))
            except Exception as e:
                self.logger.error(f"Error processing gene {gene_id}: {e}")
                record_skip(gene_id, f"{type(e).__name__}: {e}")

    def evaluate_near_domain_boundaries(self, radius: int) -> Evaluation:
        """
        Compare codon weights near domain boundaries with those elsewhere.

        A residue is positive for a domain when the number of residues from it
        to the domain's boundary (end of the domain's last range), both ends
        included, is at most radius. The boundary residue alone counts as 1,
        so radius 0 marks no residue as positive.
        Every domain makes one pass over all residues of the gene. Genes with
        fewer than two domains are skipped.

        Args:
            radius: Maximum residue count from the boundary, inclusive

        Returns:
            Evaluation with "near_boundary" as positive and "far_from_boundary"
            as negative
        """
        genes = self._require_genes()
        if radius < 0:
            raise AnalysisError(f"radius must be non-negative, got {radius}")

        evaluation = Evaluation(positive_label='near_boundary',
                                negative_label='far_from_boundary',
                                requested_count=len(genes))

        def process(gene_id: str) -> None:
            positive, negative = self._classify_near_boundaries(gene_id, radius)
            self.logger.info(f"For gene {gene_id}: bias near boundaries is {positive.mean:.4f}, "
                             f"bias outside is {negative.mean:.4f}")
            evaluation.add(gene_id, positive, negative)

        self.logger.info(f"Evaluating domain boundaries (radius {radius}) for {len(genes)} genes")
        self._run_batch(genes, evaluation.skip, process)
        self.logger.info(f"Evaluated {evaluation.processed_count}/{len(genes)} genes")
        return evaluation

    def _classify_near_boundaries(self, gene_id: str, radius: int) -> Tuple[RunningStats, RunningStats]:
        sequence = self.source.get_sequence(gene_id)
        structure = self.source.get_structure(gene_id)
        domains = self.source.get_domains(gene_id)

        if len(domains) < 2:
            raise AnalysisError(f"only {len(domains)} domain(s) were found")

        self._check_frame(gene_id, structure, sequence)

        positions: Dict[ResidueKey, int] = {}
        for i, residue in enumerate(structure.residues):
            positions.setdefault(residue.key, i)

        aligned = [(i, weight) for i, _, weight in aligned_weights(structure, sequence, self.weights)]

        positive = RunningStats()
        negative = RunningStats()
        used_domains = 0
        for domain in domains:
            if not domain.ranges:
                self.logger.warning(f"Gene {gene_id}: domain {domain.identifier} has no ranges")
                continue
            boundary = positions.get(domain.boundary_key)
            if boundary is None:
                self.logger.warning(f"Gene {gene_id}: boundary residue {domain.boundary} of "
                                    f"domain {domain.identifier} is not in the structure")
                continue

            used_domains += 1
            for i, weight in aligned:
                if residue_count(i, boundary) <= radius:
                    positive.add(weight)
                else:
                    negative.add(weight)

        if used_domains == 0:
            raise AnalysisError("no domain boundary could be located in the structure")

        return positive, negative

    def evaluate_within_beta_sheets(self) -> Evaluation:
        """
        Compare codon weights of beta-sheet residues (bridge or extended)
        with those of all other residues.

        Genes whose secondary structure cannot be assigned are skipped;
        residues without an assignment are left out.

        Returns:
            Evaluation with "beta" as positive and "non_beta" as negative
        """
        genes = self._require_genes()
        evaluation = Evaluation(positive_label='beta', negative_label='non_beta',
                                requested_count=len(genes))

        def process(gene_id: str) -> None:
            positive, negative = self._classify_beta_sheets(gene_id)
            self.logger.info(f"For gene {gene_id}: bias in beta sheets is {positive.mean:.4f}, "
                             f"bias outside is {negative.mean:.4f}")
            evaluation.add(gene_id, positive, negative)

        self.logger.info(f"Evaluating beta sheets for {len(genes)} genes")
        self._run_batch(genes, evaluation.skip, process)
        self.logger.info(f"Evaluated {evaluation.processed_count}/{len(genes)} genes")
        return evaluation

    def _classify_beta_sheets(self, gene_id: str) -> Tuple[RunningStats, RunningStats]:
        sequence = self.source.get_sequence(gene_id)
        structure = self.source.get_structure(gene_id)
        self._check_frame(gene_id, structure, sequence)

        assignment = self.source.get_secondary_structure(structure)

        positive = RunningStats()
        negative = RunningStats()
        for _, residue, weight in aligned_weights(structure, sequence, self.weights):
            state = assignment.get(residue.key)
            if state is None:
                continue
            if state.is_beta:
                positive.add(weight)
            else:
                negative.add(weight)

        if positive.count + negative.count == 0:
            raise AnalysisError("secondary structure is unavailable for all residues")

        return positive, negative

    def correlate(self, feature_fn: FeatureFunction, feature_name: Optional[str] = None) -> CorrelationResult:
        """
        Pair a per-gene feature with the gene's total codon weight.

        The total weight sums the weights of all residues that have a codon.
        A gene whose data, feature or any codon fails is dropped from both
        vectors.

        Args:
            feature_fn: Called as feature_fn(structure, residues, sequence)
            feature_name: Name of the feature column (defaults to the function name)

        Returns:
            CorrelationResult
        """
        genes = self._require_genes()
        name = feature_name or getattr(feature_fn, '__name__', 'feature')
        result = CorrelationResult(feature_name=name, requested_count=len(genes))

        def process(gene_id: str) -> None:
            sequence = self.source.get_sequence(gene_id)
            structure = self.source.get_structure(gene_id)
            self._check_frame(gene_id, structure, sequence)

            value = float(feature_fn(structure, structure.residues, sequence))
            if not math.isfinite(value):
                raise AnalysisError(f"feature {name} is not finite ({value})")

            total = sum(weight for _, _, weight in
                        aligned_weights(structure, sequence, self.weights, strict=True))
            result.add(gene_id, value, total)

        self.logger.info(f"Correlating {name} with codon weight for {len(genes)} genes")
        self._run_batch(genes, result.skipped.__setitem__, process)
        self.logger.info(f"Correlated {result.processed_count}/{len(genes)} genes")
        return result

    def correlate_length(self) -> CorrelationResult:
        """Correlate total codon weight with the number of residues."""
        return self.correlate(length_feature, feature_name='length')

    def correlate_sparseness(self) -> CorrelationResult:
        """Correlate total codon weight with C-alpha sparseness."""
        return self.correlate(sparseness_feature, feature_name='sparseness')
