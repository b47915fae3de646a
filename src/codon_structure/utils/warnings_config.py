"""
Warning configuration utility for the codon-structure pipeline.
"""

import warnings
from Bio import BiopythonWarning
from Bio.PDB.PDBExceptions import PDBConstructionWarning
import logging

logger = logging.getLogger(__name__)


def suppress_common_warnings():
    """
    Suppress common warnings that clutter the output without being actionable.
    """
    # Discontinuous chains, missing element columns and the like in PDB files
    warnings.filterwarnings("ignore", category=PDBConstructionWarning)

    # Partial codons when Biopython translates or slices sequences
    warnings.filterwarnings(
        "ignore",
        message=".*Partial codon.*",
        category=BiopythonWarning
    )

    warnings.filterwarnings(
        "ignore",
        message=".*tight_layout.*",
        category=UserWarning
    )

    logger.debug("Common warnings suppressed")


def configure_warnings(verbose: bool = False):
    """
    Configure warning behavior based on verbosity level.

    Args:
        verbose: If True, show more warnings; if False, suppress common ones
    """
    if not verbose:
        suppress_common_warnings()
    else:
        warnings.resetwarnings()
        warnings.formatwarning = lambda message, category, filename, lineno, file=None, line=None: \
            f"Warning ({category.__name__}): {message}\n"

        logger.debug("Verbose warning mode enabled")
