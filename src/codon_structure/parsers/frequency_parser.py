"""
Parser for codon frequency tables.

The format is line oriented::

    ; comment
    !Leu
    UUA	0.11
    UUG	0.11

Lines starting with ``!`` open a new amino-acid group, all other non-blank,
non-comment lines are ``CODON<TAB>FREQUENCY`` pairs of the open group.
"""

import math
import os
import re
from typing import Dict
import logging

from ..exceptions import ConfigError

logger = logging.getLogger(__name__)

COMMENT_PREFIX = ';'
GROUP_PREFIX = '!'

# plain decimal with optional exponent; no nan, inf or digit separators
_FREQUENCY_PATTERN = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')


def parse_frequency_table(table_text: str) -> Dict[str, Dict[str, float]]:
    """
    Parse frequency table text into raw frequencies grouped by amino acid.

    Args:
        table_text: Contents of a frequency table

    Returns:
        Dictionary of group name -> {codon: raw frequency}, in file order

    Raises:
        ConfigError: If a data line is malformed or a frequency is not a
            positive finite decimal
    """
    groups: Dict[str, Dict[str, float]] = {}
    group = None

    for line_num, raw_line in enumerate(table_text.splitlines(), 1):
        line = raw_line.strip()
        if not line or line.startswith(COMMENT_PREFIX):
            continue

        if line.startswith(GROUP_PREFIX):
            group = line[len(GROUP_PREFIX):].strip()
            groups.setdefault(group, {})
            logger.debug(f"Amino acid group {group}")
            continue

        parts = line.split('\t')
        if len(parts) != 2:
            raise ConfigError(f"Couldn't parse line {line_num}: {raw_line!r}")

        if group is None:
            raise ConfigError(f"Line {line_num} precedes any '!' group header: {raw_line!r}")

        codon, frequency = parts[0].strip(), parts[1].strip()
        groups[group][codon] = _parse_frequency(frequency, line_num)

    return groups


def _parse_frequency(text: str, line_num: int) -> float:
    if not _FREQUENCY_PATTERN.match(text):
        raise ConfigError(f"Frequency {text!r} on line {line_num} is not numeric")

    value = float(text)
    if not math.isfinite(value) or value <= 0:
        raise ConfigError(f"Frequency {text!r} on line {line_num} must be positive and finite")
    return value


def load_frequency_table(file_path: str) -> Dict[str, Dict[str, float]]:
    """
    Read and parse a frequency table file.

    Args:
        file_path: Path to the table

    Returns:
        Raw frequencies grouped by amino acid
    """
    if not os.path.exists(file_path):
        raise ConfigError(f"Frequency table not found: {file_path}")

    logger.info(f"Loading codon frequency table from {file_path}")

    with open(file_path, 'r', encoding='utf-8') as f:
        return parse_frequency_table(f.read())
