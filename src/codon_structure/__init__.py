"""
Codon-Structure Analysis Pipeline

A modular Python pipeline for relating codon usage bias to the structure
of the proteins the codons encode.
"""

from .utils.warnings_config import suppress_common_warnings

# Suppress common warnings on import
suppress_common_warnings()

__version__ = "1.0.0"
__author__ = "Codon-Structure Pipeline"
__email__ = "codon-structure@example.com"

from .exceptions import AnalysisError, CodonStructureError, ConfigError, LoadError, UnknownCodonError
from .parsers import frequency_parser, sequence_parser, structure_parser
from .analysis import alignment, codon_weights, correlations, evaluation, geometry
from .sources import base, local, remote
from .utils import cache, config_loader, file_utils
from .viz import plots
