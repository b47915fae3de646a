"""
Data source contract: sequences, structures, domains and secondary structure
for a gene identifier.
"""

from abc import ABC, abstractmethod
from typing import List

from ..models import Domain, ProteinStructure, SecondaryStructureMap


class StructuralDataSource(ABC):
    """Supplies everything the correlation engine needs for a gene."""

    @abstractmethod
    def get_sequence(self, gene_id: str) -> str:
        """Return the coding nucleotide sequence of a gene, or raise LoadError."""

    @abstractmethod
    def get_structure(self, gene_id: str) -> ProteinStructure:
        """Return the structure mapped from a gene, or raise LoadError."""

    @abstractmethod
    def get_domains(self, gene_id: str) -> List[Domain]:
        """Return all domains mapped from a gene, or raise LoadError."""

    @abstractmethod
    def get_secondary_structure(self, structure: ProteinStructure) -> SecondaryStructureMap:
        """Return (residue number, insertion code) -> class for a structure, or raise LoadError."""
