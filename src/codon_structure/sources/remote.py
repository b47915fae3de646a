"""
Data source backed by public web services.

Gene identifiers are Entrez Gene IDs. UniProt maps them to a PDB chain and a
RefSeq transcript, NCBI efetch supplies the coding sequence, RCSB the
structure and the PDBe SIFTS API the CATH or SCOP domains.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import requests
import logging

from .base import StructuralDataSource
from ..exceptions import LoadError
from ..models import Domain, DomainRange, ProteinStructure, SecondaryStructureMap
from ..parsers.sequence_parser import parse_fasta_text
from ..parsers.structure_parser import assign_secondary_structure, parse_structure_text
from ..utils.cache import BoundedCache

logger = logging.getLogger(__name__)

UNIPROT_SEARCH_URL = "https://rest.uniprot.org/uniprotkb/search"
ENTREZ_EFETCH_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils/efetch.fcgi"
RCSB_DOWNLOAD_URL = "https://files.rcsb.org/download/{pdb_id}.cif"
SIFTS_MAPPING_URL = "https://www.ebi.ac.uk/pdbe/api/mappings/{classification}/{pdb_id}"

# SIFTS key holding the domain name of a mapping, per classification
_DOMAIN_KEYS = {'cath': 'domain', 'scop': 'scop_id'}


@dataclass(frozen=True)
class GeneMapping:
    """Cross references resolved for one gene."""

    gene_id: str
    accession: str
    pdb_id: Optional[str]
    chain: Optional[str]
    refseq_nucleotide: Optional[str]


class RemoteDataSource(StructuralDataSource):
    """
    Fetches everything over HTTP. Each request is attempted once; failures
    raise LoadError.
    """

    def __init__(self,
                 dssp_executable: str = 'mkdssp',
                 cache_size: int = 256,
                 timeout: float = 60,
                 domain_classification: str = 'cath',
                 session: Optional[requests.Session] = None):
        if domain_classification not in _DOMAIN_KEYS:
            raise ValueError(f"Unsupported domain classification: {domain_classification}")

        self.dssp_executable = dssp_executable
        self.timeout = timeout
        self.domain_classification = domain_classification
        self.session = session or requests.Session()
        self._mappings = BoundedCache(cache_size, name='gene mappings')
        self._sequences = BoundedCache(cache_size, name='sequences')
        self._structures = BoundedCache(cache_size, name='structures')

    def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise LoadError(f"Request to {url} failed: {e}") from e
        return resp

    def get_mapping(self, gene_id: str) -> GeneMapping:
        """Resolve UniProt accession, PDB chain and RefSeq transcript for a gene."""
        return self._mappings.get_or_load(gene_id, lambda: self._load_mapping(gene_id))

    def _load_mapping(self, gene_id: str) -> GeneMapping:
        logger.info(f"Mapping gene {gene_id} through UniProt")
        resp = self._get(UNIPROT_SEARCH_URL, params={
            'query': f"xref:geneid-{gene_id}",
            'fields': 'accession,xref_pdb,xref_refseq',
            'format': 'json',
            'size': 1
        })

        try:
            results = resp.json().get('results', [])
        except ValueError as e:
            raise LoadError(f"Couldn't parse UniProt response for gene {gene_id}") from e

        if not results:
            raise LoadError(f"Gene {gene_id} not found in UniProt")

        return parse_uniprot_entry(gene_id, results[0])

    def get_sequence(self, gene_id: str) -> str:
        return self._sequences.get_or_load(gene_id, lambda: self._load_sequence(gene_id))

    def _load_sequence(self, gene_id: str) -> str:
        mapping = self.get_mapping(gene_id)
        if not mapping.refseq_nucleotide:
            raise LoadError(f"No RefSeq transcript for gene {gene_id} ({mapping.accession})")

        logger.info(f"Retrieving coding sequence {mapping.refseq_nucleotide} for gene {gene_id}")
        resp = self._get(ENTREZ_EFETCH_URL, params={
            'db': 'nuccore',
            'id': mapping.refseq_nucleotide,
            'rettype': 'fasta_cds_na',
            'retmode': 'text'
        })

        sequences = parse_fasta_text(resp.text)
        if not sequences:
            raise LoadError(f"Did not find a sequence for gene {gene_id}")

        sequence = next(iter(sequences.values()))
        logger.info(f"Found sequence of length {len(sequence)} for gene {gene_id}")
        return sequence

    def get_structure(self, gene_id: str) -> ProteinStructure:
        return self._structures.get_or_load(gene_id, lambda: self._load_structure(gene_id))

    def _load_structure(self, gene_id: str) -> ProteinStructure:
        mapping = self.get_mapping(gene_id)
        if not mapping.pdb_id:
            raise LoadError(f"PDB Id for gene {gene_id} (UniProt {mapping.accession}) not found")

        logger.info(f"Retrieving structure {mapping.pdb_id}.{mapping.chain} for gene {gene_id}")
        resp = self._get(RCSB_DOWNLOAD_URL.format(pdb_id=mapping.pdb_id))
        return parse_structure_text(resp.text, mapping.pdb_id, chain=mapping.chain,
                                    file_format='cif')

    def get_domains(self, gene_id: str) -> List[Domain]:
        mapping = self.get_mapping(gene_id)
        if not mapping.pdb_id:
            raise LoadError(f"PDB Id for gene {gene_id} (UniProt {mapping.accession}) not found")

        logger.info(f"Finding {self.domain_classification.upper()} domains for gene {gene_id}")
        pdb_id = mapping.pdb_id.lower()
        resp = self._get(SIFTS_MAPPING_URL.format(
            classification=self.domain_classification, pdb_id=pdb_id
        ))

        try:
            payload = resp.json()
        except ValueError as e:
            raise LoadError(f"Couldn't parse SIFTS response for {pdb_id}") from e

        return parse_sifts_domains(payload, pdb_id, self.domain_classification, mapping.chain)

    def get_secondary_structure(self, structure: ProteinStructure) -> SecondaryStructureMap:
        return assign_secondary_structure(structure, self.dssp_executable)


def parse_uniprot_entry(gene_id: str, entry: Dict[str, Any]) -> GeneMapping:
    """
    Pull the first PDB chain and RefSeq transcript out of a UniProt JSON entry.
    """
    accession = entry.get('primaryAccession')
    if not accession:
        raise LoadError(f"UniProt entry for gene {gene_id} has no accession")

    pdb_id = chain = refseq = None
    for xref in entry.get('uniProtKBCrossReferences', []):
        properties = {p.get('key'): p.get('value') for p in xref.get('properties', [])}
        database = xref.get('database')

        if database == 'PDB' and pdb_id is None:
            pdb_id = xref.get('id')
            # e.g. "A/B=1-393": take the first chain
            chains = properties.get('Chains', '')
            chain = chains.split('=')[0].split('/')[0].strip() or None
        elif database == 'RefSeq' and refseq is None:
            refseq = properties.get('NucleotideSequenceId')

    return GeneMapping(gene_id=gene_id, accession=accession, pdb_id=pdb_id,
                       chain=chain, refseq_nucleotide=refseq)


def parse_sifts_domains(payload: Dict[str, Any], pdb_id: str, classification: str,
                        chain: Optional[str] = None) -> List[Domain]:
    """
    Convert a PDBe SIFTS mapping response into domains of one chain.

    Segments of a domain are ordered by segment id; residue numbers are the
    author numbers used by the structure file.
    """
    entry = payload.get(pdb_id.lower(), {})
    families = entry.get(classification.upper(), {})
    domain_key = _DOMAIN_KEYS[classification]

    segments: Dict[str, List[tuple]] = {}
    for family in families.values():
        for mapping in family.get('mappings', []):
            if chain and mapping.get('chain_id') != chain:
                continue
            name = mapping.get(domain_key)
            start = _residue_number(mapping.get('start', {}))
            end_position = mapping.get('end', {})
            end = _residue_number(end_position)
            end_icode = (end_position.get('author_insertion_code') or '').strip()
            if name is None or start is None or end is None:
                continue
            segments.setdefault(name, []).append((
                mapping.get('segment_id', 0),
                DomainRange(start=start, end=end, chain=mapping.get('chain_id', ''),
                            end_insertion_code=end_icode)
            ))

    domains = []
    for name, ranges in segments.items():
        ranges.sort(key=lambda item: item[0])
        domains.append(Domain(identifier=name, ranges=[r for _, r in ranges]))

    logger.debug(f"{len(domains)} {classification} domains for {pdb_id}")
    return domains


def _residue_number(position: Dict[str, Any]) -> Optional[int]:
    number = position.get('author_residue_number')
    if number is None:
        number = position.get('residue_number')
    return None if number is None else int(number)
