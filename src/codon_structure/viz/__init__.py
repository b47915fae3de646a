"""
Visualization module for codon weight evaluations and correlations.
"""

from .plots import create_correlation_scatter, create_evaluation_boxplot
