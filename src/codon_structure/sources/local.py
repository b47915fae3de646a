"""
Data source backed by a local data directory.

Layout::

    data_dir/
        sequences/                 FASTA files (one per gene, or multi-FASTA)
        structures/<gene>.pdb      PDB or mmCIF file per gene
        domains.tsv                gene_id, domain_id, chain, start, end
        secondary_structure.tsv    optional: gene_id, residue_number, dssp_code
                                   (and optionally insertion_code)
"""

import os
from typing import Dict, List, Optional
import logging

from .base import StructuralDataSource
from ..exceptions import LoadError
from ..models import Domain, ProteinStructure, SecondaryStructureMap
from ..parsers.sequence_parser import (load_domain_table, load_secondary_structure_table,
                                       load_sequences)
from ..parsers.structure_parser import assign_secondary_structure, parse_structure_file
from ..utils.cache import BoundedCache

logger = logging.getLogger(__name__)

STRUCTURE_EXTENSIONS = ['.pdb', '.ent', '.cif', '.mmcif']


class LocalDataSource(StructuralDataSource):
    """Reads sequences, structures and domain annotations from disk."""

    def __init__(self, data_dir: str, dssp_executable: str = 'mkdssp', cache_size: int = 256):
        if not os.path.isdir(data_dir):
            raise LoadError(f"Data directory not found: {data_dir}")

        self.data_dir = data_dir
        self.dssp_executable = dssp_executable
        self._structures = BoundedCache(cache_size, name='structures')
        self._sequences: Optional[Dict[str, str]] = None
        self._domains: Optional[Dict[str, List[Domain]]] = None
        self._secondary: Optional[Dict[str, SecondaryStructureMap]] = None

    def get_sequence(self, gene_id: str) -> str:
        if self._sequences is None:
            self._sequences = load_sequences(os.path.join(self.data_dir, 'sequences'))

        sequence = self._sequences.get(gene_id)
        if sequence is None:
            raise LoadError(f"Did not find a sequence for gene {gene_id}")

        logger.debug(f"Found sequence of length {len(sequence)} for gene {gene_id}")
        return sequence

    def get_structure(self, gene_id: str) -> ProteinStructure:
        return self._structures.get_or_load(gene_id, lambda: self._load_structure(gene_id))

    def _load_structure(self, gene_id: str) -> ProteinStructure:
        structure_dir = os.path.join(self.data_dir, 'structures')
        for extension in STRUCTURE_EXTENSIONS:
            path = os.path.join(structure_dir, gene_id + extension)
            if os.path.exists(path):
                logger.debug(f"Parsing structure for gene {gene_id} from {path}")
                return parse_structure_file(path, identifier=gene_id)

        raise LoadError(f"No structure file for gene {gene_id} in {structure_dir}")

    def get_domains(self, gene_id: str) -> List[Domain]:
        if self._domains is None:
            self._domains = load_domain_table(os.path.join(self.data_dir, 'domains.tsv'))

        if gene_id not in self._domains:
            raise LoadError(f"No domain annotation for gene {gene_id} in domains.tsv")

        return list(self._domains[gene_id])

    def get_secondary_structure(self, structure: ProteinStructure) -> SecondaryStructureMap:
        if self._secondary is None:
            path = os.path.join(self.data_dir, 'secondary_structure.tsv')
            self._secondary = load_secondary_structure_table(path) if os.path.exists(path) else {}

        precomputed = self._secondary.get(structure.identifier)
        if precomputed:
            return dict(precomputed)

        return assign_secondary_structure(structure, self.dssp_executable)
