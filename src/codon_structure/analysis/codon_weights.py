"""
Codon weight model: relative translational speed per codon.

A weight of 1.0 carries no information; above 1.0 means a codon is used
more often (and assumed faster) than the average of its synonyms, below
1.0 less often.
"""

import math
import os
import re
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional
import pandas as pd
from Bio.Data import CodonTable
from Bio.SeqUtils import seq1
import logging

from ..exceptions import ConfigError, UnknownCodonError
from ..parsers.frequency_parser import load_frequency_table, parse_frequency_table

logger = logging.getLogger(__name__)

DATA_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'data')
TABLE_EXTENSION = '.codons'

EXPECTED_GROUPS = 21
EXPECTED_CODONS = 64
FREQUENCY_SUM_TOLERANCE = 0.01
# float rounding slack; a sum of exactly 1 +- tolerance passes
_SUM_EPSILON = 1e-9


class Species(Enum):
    """Species with a bundled frequency table."""

    E_COLI = 'E. coli'
    S_CEREVISIAE = 'S. cerevisiae'


def normalize_codon(codon: str) -> str:
    """Uppercase a codon and convert DNA to RNA (T -> U)."""
    return codon.upper().replace('T', 'U')


def species_table_path(species) -> str:
    """
    Get the path of the bundled table for a species.

    Args:
        species: Species enum member or name such as "E. coli"

    Returns:
        Path to the bundled frequency table
    """
    name = species.value if isinstance(species, Species) else str(species)
    file_name = re.sub(r'\s+', '', name.lower().replace('.', '_'))
    return os.path.join(DATA_DIR, file_name + TABLE_EXTENSION)


def available_species() -> List[str]:
    """List names of species with a bundled table."""
    return [species.value for species in Species]


class CodonWeightTable:
    """
    Immutable mapping of codon -> relative speed weight.

    Build it with :meth:`build`, :meth:`from_file` or :meth:`for_species`.
    """

    def __init__(self, groups: Dict[str, Dict[str, float]]):
        self._groups = MappingProxyType({
            group: MappingProxyType(dict(codons)) for group, codons in groups.items()
        })
        self._weights: Dict[str, float] = {}
        self._amino_acids: Dict[str, str] = {}
        for group, codons in groups.items():
            for codon, weight in codons.items():
                self._weights[codon] = weight
                self._amino_acids[codon] = group

    @classmethod
    def build(cls, table_text: str) -> 'CodonWeightTable':
        """
        Parse a frequency table and normalize it into weights.

        Args:
            table_text: Frequency table contents

        Returns:
            CodonWeightTable

        Raises:
            ConfigError: If the table is malformed
        """
        raw = parse_frequency_table(table_text)
        return cls.from_frequencies(raw)

    @classmethod
    def from_file(cls, file_path: str) -> 'CodonWeightTable':
        """Build a table from a frequency table file."""
        return cls.from_frequencies(load_frequency_table(file_path))

    @classmethod
    def for_species(cls, species) -> 'CodonWeightTable':
        """Build a table from the bundled frequencies of a species."""
        path = species_table_path(species)
        if not os.path.exists(path):
            raise ConfigError(
                f"No bundled frequency table for species {species!r}; "
                f"available: {', '.join(available_species())}"
            )
        return cls.from_file(path)

    @classmethod
    def from_frequencies(cls, raw: Dict[str, Dict[str, float]]) -> 'CodonWeightTable':
        """
        Normalize raw frequencies grouped by amino acid.

        For each group, weight = frequency / mean(frequencies of the group).
        """
        validate_frequencies(raw)

        groups: Dict[str, Dict[str, float]] = {}
        for group, codons in raw.items():
            if not codons:
                logger.warning(f"Amino acid group {group} has no codons")
                continue
            if not all(math.isfinite(f) and f > 0 for f in codons.values()):
                raise ConfigError(f"Codon frequencies for {group} must be positive and finite")
            mean = sum(codons.values()) / len(codons)
            groups[group] = {
                normalize_codon(codon): frequency / mean
                for codon, frequency in codons.items()
            }

        logger.info(f"Built codon weight table with {len(groups)} groups")
        return cls(groups)

    def get_weight(self, codon: str) -> float:
        """
        Get the weight of a codon.

        Lookup is case-insensitive and treats T as U.

        Raises:
            UnknownCodonError: If the codon is not in the table
        """
        key = normalize_codon(codon)
        try:
            return self._weights[key]
        except KeyError:
            raise UnknownCodonError(key) from None

    def amino_acid_of(self, codon: str) -> str:
        """Get the name of the group a codon belongs to."""
        key = normalize_codon(codon)
        try:
            return self._amino_acids[key]
        except KeyError:
            raise UnknownCodonError(key) from None

    @property
    def groups(self) -> Mapping[str, Mapping[str, float]]:
        return self._groups

    @property
    def codons(self) -> List[str]:
        return sorted(self._weights)

    def __contains__(self, codon) -> bool:
        return isinstance(codon, str) and normalize_codon(codon) in self._weights

    def __len__(self) -> int:
        return len(self._weights)

    def __repr__(self) -> str:
        return f"CodonWeightTable({len(self._groups)} groups, {len(self._weights)} codons)"

    def to_dataframe(self) -> pd.DataFrame:
        """
        Get the table as a DataFrame.

        Returns:
            DataFrame with columns: amino_acid, codon, weight
        """
        rows = [
            {'amino_acid': group, 'codon': codon, 'weight': weight}
            for group, codons in self._groups.items()
            for codon, weight in codons.items()
        ]
        return pd.DataFrame(rows, columns=['amino_acid', 'codon', 'weight'])


def validate_frequencies(raw: Dict[str, Dict[str, float]]) -> List[str]:
    """
    Sanity-check raw frequencies. Problems are logged, not raised.

    Args:
        raw: Raw frequencies grouped by amino acid

    Returns:
        List of warning messages
    """
    problems = []

    if len(raw) != EXPECTED_GROUPS:
        problems.append(
            f"{len(raw)} amino acid groups were found (including stop codons, "
            f"should be {EXPECTED_GROUPS})"
        )

    n_codons = sum(len(codons) for codons in raw.values())
    if n_codons < EXPECTED_CODONS:
        problems.append(f"Only {n_codons} codons were found")
    elif n_codons > EXPECTED_CODONS:
        problems.append(f"Too many ({n_codons}) codons were found")

    for group, codons in raw.items():
        total = sum(codons.values())
        if abs(total - 1.0) > FREQUENCY_SUM_TOLERANCE + _SUM_EPSILON:
            problems.append(f"Codon frequencies for {group} sum to {total:.4f}")

    problems.extend(_check_genetic_code(raw))

    for problem in problems:
        logger.warning(problem)

    return problems


def _check_genetic_code(raw: Dict[str, Dict[str, float]]) -> List[str]:
    """Compare three-letter group names with the standard genetic code."""
    table = CodonTable.unambiguous_rna_by_id[1]
    problems = []

    for group, codons in raw.items():
        expected: Optional[str]
        if group.lower() in ('stop', 'ter', '*'):
            expected = '*'
        elif len(group) == 3:
            expected = seq1(group)
            if expected == 'X':
                continue
        else:
            continue

        for codon in codons:
            key = normalize_codon(codon)
            actual = '*' if key in table.stop_codons else table.forward_table.get(key)
            if actual != expected:
                problems.append(
                    f"Codon {key} is listed under {group} but codes for {actual} "
                    f"in the standard genetic code"
                )

    return problems
