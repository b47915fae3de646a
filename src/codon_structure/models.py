"""
Data model shared by parsers, data sources and the analysis engine.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
import numpy as np

# (author residue number, insertion code)
ResidueKey = Tuple[int, str]


class SecondaryStructure(Enum):
    """Per-residue secondary-structure class, named after the DSSP states."""

    ALPHA_HELIX = 'alpha_helix'
    BRIDGE = 'bridge'
    EXTENDED = 'extended'
    THREE_TEN_HELIX = 'three_ten_helix'
    PI_HELIX = 'pi_helix'
    TURN = 'turn'
    BEND = 'bend'
    COIL = 'coil'

    @classmethod
    def from_dssp(cls, code: str) -> 'SecondaryStructure':
        """Map a one-letter DSSP code; unknown codes are coil."""
        return _DSSP_CODES.get(code.strip().upper(), cls.COIL)

    @property
    def is_beta(self) -> bool:
        return self in (SecondaryStructure.BRIDGE, SecondaryStructure.EXTENDED)


_DSSP_CODES = {
    'H': SecondaryStructure.ALPHA_HELIX,
    'B': SecondaryStructure.BRIDGE,
    'E': SecondaryStructure.EXTENDED,
    'G': SecondaryStructure.THREE_TEN_HELIX,
    'I': SecondaryStructure.PI_HELIX,
    'P': SecondaryStructure.COIL,
    'T': SecondaryStructure.TURN,
    'S': SecondaryStructure.BEND,
}


@dataclass(frozen=True)
class Residue:
    """A residue with the coordinate of its representative (C-alpha) atom."""

    number: int
    coord: np.ndarray = field(compare=False, repr=False)
    insertion_code: str = ''
    name: str = ''

    @property
    def key(self) -> ResidueKey:
        """(number, insertion code); tells 52 and 52A apart."""
        return (self.number, self.insertion_code)


@dataclass(frozen=True)
class DomainRange:
    """Inclusive residue-number range of a domain on one chain."""

    start: int
    end: int
    chain: str = ''
    end_insertion_code: str = ''


@dataclass
class Domain:
    """A structural domain made of one or more ranges, in declared order."""

    identifier: str
    ranges: List[DomainRange]

    @property
    def boundary(self) -> int:
        """Outermost boundary residue: end of the last declared range."""
        return self.ranges[-1].end

    @property
    def boundary_key(self) -> ResidueKey:
        """Boundary residue as (number, insertion code)."""
        last = self.ranges[-1]
        return (last.end, last.end_insertion_code)


@dataclass
class ProteinStructure:
    """
    Ordered residues of one protein chain.

    ``model`` keeps the parsed Bio.PDB object when the source has one, so
    that secondary structure can be assigned later.
    """

    identifier: str
    residues: List[Residue]
    chain: str = ''
    model: Optional[Any] = field(default=None, repr=False)
    path: Optional[str] = None

    @property
    def coordinates(self) -> np.ndarray:
        if not self.residues:
            return np.empty((0, 3))
        return np.vstack([residue.coord for residue in self.residues])

    def __len__(self) -> int:
        return len(self.residues)


SecondaryStructureMap = Dict[ResidueKey, SecondaryStructure]
