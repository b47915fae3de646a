"""Shared fixtures: an in-memory data source and small weight tables."""

import numpy as np
import pytest

from codon_structure.analysis.codon_weights import CodonWeightTable
from codon_structure.exceptions import LoadError
from codon_structure.models import Domain, DomainRange, ProteinStructure, Residue
from codon_structure.sources.base import StructuralDataSource

# Ala: GCU 1.5, GCC 0.5; Gly: GGU 1.0, GGC 1.0
TOY_TABLE = """\
; toy table
!Ala
GCU\t0.75
GCC\t0.25
!Gly
GGU\t0.5
GGC\t0.5
"""

CA_SPACING = 3.8


def make_structure(identifier, n_residues, first_number=1):
    """Straight chain of C-alpha atoms spaced 3.8 A apart."""
    residues = [
        Residue(number=first_number + i, coord=np.array([i * CA_SPACING, 0.0, 0.0]))
        for i in range(n_residues)
    ]
    return ProteinStructure(identifier=identifier, residues=residues, chain='A')


def make_domain(identifier, *ranges):
    return Domain(identifier=identifier,
                  ranges=[DomainRange(start=start, end=end, chain='A') for start, end in ranges])


class FakeDataSource(StructuralDataSource):
    """Serves prepared data; genes listed in ``failures`` raise on the named lookup."""

    def __init__(self, sequences=None, structures=None, domains=None, secondary=None,
                 failures=None):
        self.sequences = sequences or {}
        self.structures = structures or {}
        self.domains = domains or {}
        self.secondary = secondary or {}
        self.failures = failures or {}
        self.calls = []

    def _fail(self, gene_id, lookup):
        if self.failures.get(gene_id) == lookup:
            raise LoadError(f"{lookup} unavailable for {gene_id}")

    def get_sequence(self, gene_id):
        self.calls.append(('sequence', gene_id))
        self._fail(gene_id, 'sequence')
        if gene_id not in self.sequences:
            raise LoadError(f"Did not find a sequence for gene {gene_id}")
        return self.sequences[gene_id]

    def get_structure(self, gene_id):
        self.calls.append(('structure', gene_id))
        self._fail(gene_id, 'structure')
        if gene_id not in self.structures:
            raise LoadError(f"No structure for gene {gene_id}")
        return self.structures[gene_id]

    def get_domains(self, gene_id):
        self._fail(gene_id, 'domains')
        return list(self.domains.get(gene_id, []))

    def get_secondary_structure(self, structure):
        self._fail(structure.identifier, 'secondary')
        return dict(self.secondary.get(structure.identifier, {}))


@pytest.fixture
def toy_weights():
    return CodonWeightTable.build(TOY_TABLE)


@pytest.fixture(scope="session")
def ecoli_weights():
    return CodonWeightTable.for_species('E. coli')


def pdb_text(n_residues, chain="A", first_number=1):
    """Minimal PDB file with one C-alpha atom per alanine residue."""
    lines = []
    for i in range(n_residues):
        number = first_number + i
        lines.append(
            "ATOM  " + f"{i + 1:5d}" + " " + " CA " + " " + "ALA" + " " + chain
            + f"{number:4d}" + " " + "   "
            + f"{i * CA_SPACING:8.3f}{0.0:8.3f}{0.0:8.3f}" + "  1.00" + "  0.00"
            + " " * 10 + " C"
        )
    lines.append("HETATM" + f"{n_residues + 1:5d}" + " " + " O  " + " " + "HOH" + " " + chain
                 + f"{first_number + n_residues + 10:4d}" + " " + "   "
                 + f"{0.0:8.3f}{5.0:8.3f}{0.0:8.3f}" + "  1.00" + "  0.00"
                 + " " * 10 + " O")
    lines.append("END")
    return "\n".join(lines) + "\n"


@pytest.fixture
def data_dir(tmp_path):
    (tmp_path / "sequences").mkdir()
    (tmp_path / "structures").mkdir()
    (tmp_path / "sequences" / "g1.fasta").write_text(">g1\n" + "GCT" * 4 + "GCC" * 2 + "\n")
    (tmp_path / "structures" / "g1.pdb").write_text(pdb_text(6))
    (tmp_path / "domains.tsv").write_text(
        "gene_id\tdomain_id\tchain\tstart\tend\n"
        "g1\td1\tA\t1\t3\n"
        "g1\td2\tA\t4\t6\n"
    )
    (tmp_path / "secondary_structure.tsv").write_text(
        "gene_id\tresidue_number\tdssp_code\n"
        + "".join(f"g1\t{n}\t{'E' if n <= 3 else 'H'}\n" for n in range(1, 7))
    )
    return tmp_path
