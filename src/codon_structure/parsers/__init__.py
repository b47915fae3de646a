"""
Parsers module for frequency tables, sequences, annotations and structures.
"""

from .frequency_parser import load_frequency_table, parse_frequency_table
from .sequence_parser import load_domain_table, load_gene_list, load_sequences
from .structure_parser import assign_secondary_structure, parse_structure_file
