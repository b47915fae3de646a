"""
Plots of evaluations and correlations.
"""

import math
import os
from typing import Optional
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import seaborn as sns
import logging

from ..analysis.correlations import CorrelationResult
from ..analysis.evaluation import Evaluation

logger = logging.getLogger(__name__)

plt.style.use('default')
sns.set_palette("husl")


def create_evaluation_boxplot(
    evaluation: Evaluation,
    output_path: str,
    title: Optional[str] = None,
    figsize: tuple = (6, 6),
    format: str = 'svg'
) -> None:
    """
    Boxplot of per-gene mean codon weights, positive class vs negative class.

    Args:
        evaluation: Evaluation to plot
        output_path: Path to save the figure
        title: Optional custom title
        figsize: Figure size tuple
        format: Output format ('svg', 'pdf', 'png')
    """
    df = evaluation.to_dataframe().dropna(subset=['mean'])

    if df.empty:
        logger.warning("No per-gene means to plot")
        return

    fig, ax = plt.subplots(figsize=figsize)

    order = [evaluation.positive_label, evaluation.negative_label]
    sns.boxplot(data=df, x='class', y='mean', order=order, hue='class',
                palette=['lightcoral', 'lightblue'], legend=False, ax=ax)
    sns.stripplot(data=df, x='class', y='mean', order=order, color='black',
                  size=3, alpha=0.5, ax=ax)

    counts = df['class'].value_counts()
    ax.set_xticks(range(len(order)))
    ax.set_xticklabels([f"{label}\n(n={counts.get(label, 0)})" for label in order])
    ax.axhline(1.0, color='grey', linestyle='--', linewidth=1)
    ax.set_xlabel('')
    ax.set_ylabel('Mean codon weight per gene', fontsize=12)
    ax.set_title(title or f'Codon weight: {order[0]} vs {order[1]}',
                 fontsize=14, fontweight='bold')
    ax.grid(True, alpha=0.3)

    _add_comparison_stats(ax, evaluation)

    plt.tight_layout()
    _save_figure(fig, output_path, format)
    plt.close(fig)

    logger.info(f"Saved evaluation boxplot to {output_path}")


def create_correlation_scatter(
    result: CorrelationResult,
    output_path: str,
    title: Optional[str] = None,
    figsize: tuple = (8, 6),
    format: str = 'svg'
) -> None:
    """
    Scatter plot of a feature against total codon weight, with a regression line.

    Args:
        result: Correlation result to plot
        output_path: Path to save the figure
        title: Optional custom title
        figsize: Figure size tuple
        format: Output format ('svg', 'pdf', 'png')
    """
    df = result.to_dataframe()

    if len(df) < 2:
        logger.warning(f"Only {len(df)} gene(s) to plot, skipping scatter plot")
        return

    fig, ax = plt.subplots(figsize=figsize)

    sns.regplot(data=df, x=result.feature_name, y='total_codon_weight', ax=ax,
                scatter_kws={'alpha': 0.7, 's': 30}, line_kws={'color': 'darkred'})

    r, p_value = result.pearson()
    if not math.isnan(r):
        ax.text(0.02, 0.95, f'r = {r:.3f}, p = {p_value:.4f}, n = {len(df)}',
                transform=ax.transAxes, ha='left', va='top',
                bbox=dict(boxstyle='round,pad=0.3', facecolor='yellow', alpha=0.7))

    ax.set_xlabel(result.feature_name.capitalize(), fontsize=12)
    ax.set_ylabel('Total codon weight', fontsize=12)
    ax.set_title(title or f'Codon weight vs {result.feature_name}',
                 fontsize=14, fontweight='bold')
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    _save_figure(fig, output_path, format)
    plt.close(fig)

    logger.info(f"Saved correlation scatter plot to {output_path}")


def _add_comparison_stats(ax, evaluation: Evaluation) -> None:
    """Add paired test and class means to a boxplot."""
    stat, p_value = evaluation.paired_test()
    if not math.isnan(p_value):
        ax.text(0.5, 0.95, f'Wilcoxon p = {p_value:.4f}',
                transform=ax.transAxes, ha='center', va='top',
                bbox=dict(boxstyle='round,pad=0.3', facecolor='yellow', alpha=0.7))

    ax.text(0.02, 0.08, f'Mean {evaluation.positive_label}: {evaluation.mean_positive_mean:.3f}',
            transform=ax.transAxes, ha='left', va='bottom', fontsize=9)
    ax.text(0.02, 0.03, f'Mean {evaluation.negative_label}: {evaluation.mean_negative_mean:.3f}',
            transform=ax.transAxes, ha='left', va='bottom', fontsize=9)


def _save_figure(fig, output_path: str, format: str) -> None:
    """Save figure in specified format."""
    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    if format.lower() == 'pdf':
        fig.savefig(output_path, format='pdf', bbox_inches='tight', dpi=300)
    elif format.lower() == 'png':
        fig.savefig(output_path, format='png', bbox_inches='tight', dpi=300)
    else:
        fig.savefig(output_path, format='svg', bbox_inches='tight')
