"""
Positional alignment between a coding sequence and a structure.

Residue i of the structure is assumed to be encoded by codon i of the
sequence. There is no gap model: insertions, deletions and splicing are not
handled.
"""

from typing import Iterator, Optional, Tuple
import logging

from .codon_weights import CodonWeightTable
from ..exceptions import UnknownCodonError
from ..models import ProteinStructure, Residue

logger = logging.getLogger(__name__)

CODON_LENGTH = 3


def codon_at(sequence: str, residue_index: int) -> Optional[str]:
    """
    Get the codon aligned with a residue index.

    Returns:
        sequence[3i:3i+3], or None if that range is not inside the sequence
    """
    start = residue_index * CODON_LENGTH
    end = start + CODON_LENGTH
    if residue_index < 0 or end > len(sequence):
        return None
    return sequence[start:end]


def check_frame_consistency(residue_count: int, sequence_length: int) -> bool:
    """True iff the sequence holds exactly one codon per residue."""
    return sequence_length == residue_count * CODON_LENGTH


def aligned_weights(structure: ProteinStructure, sequence: str, weights: CodonWeightTable,
                    strict: bool = False) -> Iterator[Tuple[int, Residue, float]]:
    """
    Yield (index, residue, codon weight) for every residue that has a codon.

    Residues beyond the end of the sequence are skipped. Unknown codons skip
    the residue, or propagate UnknownCodonError when strict is set.
    """
    for i, residue in enumerate(structure.residues):
        codon = codon_at(sequence, i)
        if codon is None:
            continue
        try:
            weight = weights.get_weight(codon)
        except UnknownCodonError:
            if strict:
                raise
            logger.debug(f"Skipping residue {residue.number} of {structure.identifier}: "
                         f"unknown codon {codon}")
            continue
        yield i, residue, weight
