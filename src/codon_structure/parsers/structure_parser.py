"""
Structure parser module built on Bio.PDB.
"""

import io
import os
import tempfile
from typing import Optional
from Bio.PDB import DSSP, MMCIFParser, PDBIO, PDBParser
from Bio.PDB.Structure import Structure
import logging

from ..exceptions import LoadError
from ..models import ProteinStructure, Residue, SecondaryStructure, SecondaryStructureMap

logger = logging.getLogger(__name__)

REPRESENTATIVE_ATOM = 'CA'


def _parser_for(file_name: str):
    if file_name.lower().endswith(('.cif', '.mmcif')):
        return MMCIFParser(QUIET=True)
    return PDBParser(QUIET=True)


def parse_structure_file(file_path: str, identifier: Optional[str] = None,
                         chain: Optional[str] = None) -> ProteinStructure:
    """
    Parse a PDB or mmCIF file into a ProteinStructure.

    Args:
        file_path: Path to the structure file
        identifier: Structure identifier (defaults to the file name)
        chain: Chain to extract (defaults to the first chain with residues)

    Returns:
        ProteinStructure with one residue per C-alpha atom

    Raises:
        LoadError: If the file is missing or cannot be parsed
    """
    if not os.path.exists(file_path):
        raise LoadError(f"Structure file not found: {file_path}")

    identifier = identifier or os.path.splitext(os.path.basename(file_path))[0]

    try:
        model = _parser_for(file_path).get_structure(identifier, file_path)
    except Exception as e:
        raise LoadError(f"Couldn't parse structure {file_path}: {e}") from e

    structure = extract_chain(model, identifier, chain)
    structure.path = file_path
    return structure


def parse_structure_text(text: str, identifier: str, chain: Optional[str] = None,
                         file_format: str = 'pdb') -> ProteinStructure:
    """
    Parse structure file contents held in memory.

    Args:
        text: PDB or mmCIF text
        identifier: Structure identifier
        chain: Chain to extract
        file_format: 'pdb' or 'cif'

    Returns:
        ProteinStructure
    """
    parser = _parser_for(f"x.{file_format}")
    try:
        model = parser.get_structure(identifier, io.StringIO(text))
    except Exception as e:
        raise LoadError(f"Couldn't parse structure {identifier}: {e}") from e

    return extract_chain(model, identifier, chain)


def extract_chain(model: Structure, identifier: str,
                  chain: Optional[str] = None) -> ProteinStructure:
    """
    Collect the C-alpha residues of one chain of the first model.

    Hetero residues and waters are skipped.
    """
    first_model = next(iter(model), None)
    if first_model is None:
        raise LoadError(f"Structure {identifier} has no models")

    for pdb_chain in first_model:
        if chain and pdb_chain.id != chain:
            continue

        residues = []
        for residue in pdb_chain:
            hetfield, number, insertion_code = residue.id
            if hetfield.strip():
                continue
            if REPRESENTATIVE_ATOM not in residue:
                continue
            residues.append(Residue(
                number=number,
                coord=residue[REPRESENTATIVE_ATOM].get_coord().astype(float),
                insertion_code=insertion_code.strip(),
                name=residue.get_resname()
            ))

        if residues:
            logger.debug(f"Structure {identifier} chain {pdb_chain.id}: {len(residues)} residues")
            return ProteinStructure(
                identifier=identifier,
                residues=residues,
                chain=pdb_chain.id,
                model=model
            )

    if chain:
        raise LoadError(f"Chain {chain} of structure {identifier} has no C-alpha atoms")
    raise LoadError(f"Structure {identifier} has no C-alpha atoms")


def assign_secondary_structure(structure: ProteinStructure,
                               dssp_executable: str = 'mkdssp') -> SecondaryStructureMap:
    """
    Assign secondary structure with DSSP.

    Args:
        structure: Structure that still holds its Bio.PDB model
        dssp_executable: DSSP binary name or path

    Returns:
        Dictionary of (residue number, insertion code) -> SecondaryStructure
        for the structure's chain

    Raises:
        LoadError: If DSSP cannot be run on the structure
    """
    if structure.model is None:
        raise LoadError(f"Structure {structure.identifier} has no atomic model for DSSP")

    first_model = next(iter(structure.model))
    path = structure.path
    temp_path = None

    try:
        if path is None or not os.path.exists(path):
            with tempfile.NamedTemporaryFile(mode='w', suffix='.pdb', delete=False) as handle:
                temp_path = handle.name
                writer = PDBIO()
                writer.set_structure(structure.model)
                writer.save(handle)
            path = temp_path

        dssp = DSSP(first_model, path, dssp=dssp_executable)
    except Exception as e:
        raise LoadError(
            f"Failed assigning secondary structure for {structure.identifier}: {e}"
        ) from e
    finally:
        if temp_path and os.path.exists(temp_path):
            os.remove(temp_path)

    assignment: SecondaryStructureMap = {}
    for chain_id, residue_id in dssp.keys():
        if structure.chain and chain_id != structure.chain:
            continue
        code = dssp[(chain_id, residue_id)][2]
        assignment[(residue_id[1], residue_id[2].strip())] = SecondaryStructure.from_dssp(code)

    logger.debug(f"DSSP assigned {len(assignment)} residues of {structure.identifier}")
    return assignment

