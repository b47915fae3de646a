"""
Analysis module for codon weights and their relation to protein structure.
"""

from .codon_weights import CodonWeightTable, Species
from .correlations import CorrelationEngine, CorrelationResult
from .evaluation import Evaluation, RunningStats
from .geometry import sparseness
