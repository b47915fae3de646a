"""
Parsers for gene lists, coding sequences and per-gene annotation tables.
"""

import glob
import io
import os
from typing import Dict, List
import pandas as pd
from Bio import SeqIO
import logging

from ..exceptions import LoadError
from ..models import Domain, DomainRange, SecondaryStructure, SecondaryStructureMap

logger = logging.getLogger(__name__)

FASTA_EXTENSIONS = ['.fasta', '.fa', '.fna', '.ffn']

DOMAIN_COLUMNS = ['gene_id', 'domain_id', 'chain', 'start', 'end']
SECONDARY_STRUCTURE_COLUMNS = ['gene_id', 'residue_number', 'dssp_code']


def parse_gene_list(text: str) -> List[str]:
    """
    Parse a gene identifier list: one id per line, blank and ';' lines ignored.
    """
    genes = []
    for line in text.splitlines():
        line = line.strip()
        if line and not line.startswith(';'):
            genes.append(line)
    return genes


def load_gene_list(file_path: str) -> List[str]:
    """
    Load gene identifiers from a file.

    Args:
        file_path: Path to a line-by-line list of gene identifiers

    Returns:
        List of gene identifiers in file order
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Gene list not found: {file_path}")

    with open(file_path, 'r', encoding='utf-8') as f:
        genes = parse_gene_list(f.read())

    logger.info(f"Loaded {len(genes)} gene identifiers from {file_path}")
    return genes


def parse_fasta_text(text: str) -> Dict[str, str]:
    """
    Parse FASTA text into record id -> uppercase sequence.
    """
    return {
        record.id: str(record.seq).upper()
        for record in SeqIO.parse(io.StringIO(text), 'fasta')
    }


def load_sequences(sequence_dir: str) -> Dict[str, str]:
    """
    Glob all FASTA files in a directory and collect their records.

    A single-record file named after a gene maps that gene to its sequence
    whatever the record header says; multi-record files map by record id.

    Args:
        sequence_dir: Directory containing FASTA files

    Returns:
        Dictionary mapping gene IDs to nucleotide sequences
    """
    if not os.path.isdir(sequence_dir):
        raise LoadError(f"Sequence directory not found: {sequence_dir}")

    files_found = []
    for extension in FASTA_EXTENSIONS:
        files_found.extend(glob.glob(os.path.join(sequence_dir, f"*{extension}")))

    if not files_found:
        logger.warning(f"No FASTA files found in {sequence_dir}")

    sequences: Dict[str, str] = {}
    for file_path in sorted(files_found):
        try:
            records = list(SeqIO.parse(file_path, 'fasta'))
        except Exception as e:
            logger.error(f"Error parsing {file_path}: {e}")
            continue

        if len(records) == 1:
            gene_id = os.path.splitext(os.path.basename(file_path))[0]
            sequences[gene_id] = str(records[0].seq).upper()
            sequences.setdefault(records[0].id, sequences[gene_id])
        else:
            for record in records:
                sequences[record.id] = str(record.seq).upper()

    logger.info(f"Loaded {len(sequences)} sequences from {sequence_dir}")
    return sequences


def load_domain_table(file_path: str) -> Dict[str, List[Domain]]:
    """
    Load domain ranges from a TSV file.

    Rows sharing a (gene_id, domain_id) pair are ranges of one domain, kept
    in file order so that the last row gives the domain's boundary.

    Args:
        file_path: TSV with columns gene_id, domain_id, chain, start, end

    Returns:
        Dictionary of gene id -> list of domains
    """
    df = _read_table(file_path, DOMAIN_COLUMNS)

    domains: Dict[str, List[Domain]] = {}
    index: Dict[tuple, Domain] = {}
    for row in df.itertuples(index=False):
        gene_id = str(row.gene_id)
        key = (gene_id, str(row.domain_id))
        chain = '' if pd.isna(row.chain) else str(row.chain)
        domain_range = DomainRange(start=int(row.start), end=int(row.end), chain=chain)

        if key not in index:
            index[key] = Domain(identifier=str(row.domain_id), ranges=[])
            domains.setdefault(gene_id, []).append(index[key])
        index[key].ranges.append(domain_range)

    logger.info(f"Loaded {len(index)} domains for {len(domains)} genes from {file_path}")
    return domains


def load_secondary_structure_table(file_path: str) -> Dict[str, SecondaryStructureMap]:
    """
    Load precomputed secondary structure (DSSP one-letter codes) from a TSV file.

    An optional insertion_code column tells apart residues sharing a number.

    Returns:
        Dictionary of gene id -> {(residue number, insertion code): SecondaryStructure}
    """
    df = _read_table(file_path, SECONDARY_STRUCTURE_COLUMNS)
    if 'insertion_code' not in df.columns:
        df['insertion_code'] = ''
    df = df.fillna({'insertion_code': '', 'dssp_code': ''})

    assignments: Dict[str, SecondaryStructureMap] = {}
    for row in df.itertuples(index=False):
        key = (int(row.residue_number), str(row.insertion_code).strip())
        assignments.setdefault(str(row.gene_id), {})[key] = \
            SecondaryStructure.from_dssp(str(row.dssp_code))

    return assignments


def _read_table(file_path: str, columns: List[str]) -> pd.DataFrame:
    if not os.path.exists(file_path):
        raise LoadError(f"Table not found: {file_path}")

    try:
        df = pd.read_csv(file_path, sep='\t', comment='#', dtype=str)
    except Exception as e:
        raise LoadError(f"Couldn't read {file_path}: {e}") from e

    missing = [column for column in columns if column not in df.columns]
    if missing:
        raise LoadError(f"{file_path} is missing columns: {', '.join(missing)}")

    return df
