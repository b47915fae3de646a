"""
Exception hierarchy for the codon-structure pipeline.
"""


class CodonStructureError(Exception):
    """Base class for all errors raised by the pipeline."""


class ConfigError(CodonStructureError):
    """A frequency table or configuration file is malformed."""


class LoadError(CodonStructureError):
    """A data source could not resolve the data for a gene."""


class UnknownCodonError(CodonStructureError, KeyError):
    """
    A codon is not present in the weight table.

    Usually caused by a frame-shifted or truncated coding sequence.
    """

    def __init__(self, codon: str):
        self.codon = codon
        super().__init__(f"Codon {codon!r} does not exist in the weight table")

    def __str__(self) -> str:
        return self.args[0]


class AnalysisError(CodonStructureError):
    """A precondition of an analysis was violated."""
