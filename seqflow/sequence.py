"""
SeqFlow - Sequence Record

The minimal sequence record consumed by the matcher and the samplers.

Parsing FASTA/FASTQ is somebody else's job; by the time a record reaches
this package it is an already-validated ``{id, sequence}`` pair.
"""

from typing import Optional, Tuple, Union
from dataclasses import dataclass


UNKNOWN_ID = "unknown"


class SequenceError(Exception):
    """Error types for sequence records."""
    pass


class EmptyIdError(SequenceError):
    """Raised when a record is given an explicitly empty identifier."""
    pass


@dataclass
class Sequence:
    """
    A named genomic sequence.

    Attributes:
        sequence: The residues, in whatever case the reader produced
        id: Sequence identifier (defaults to ``"unknown"``)
        description: Optional free-text description from the header line
    """
    sequence: str
    id: str = UNKNOWN_ID
    description: Optional[str] = None

    def __post_init__(self):
        if self.id is None:
            self.id = UNKNOWN_ID
        if len(self.id) == 0:
            raise EmptyIdError("Sequence ID cannot be empty")

    @classmethod
    def with_id(cls, id: str, sequence: str) -> 'Sequence':
        """Create a record with an identifier."""
        return cls(sequence=sequence, id=id)

    def __len__(self) -> int:
        return len(self.sequence)

    def __str__(self) -> str:
        return f">{self.id}\n{self.sequence}"


def as_text(item: Union[Sequence, str]) -> Tuple[str, str]:
    """
    Split a record or raw string into ``(text, sequence_id)``.

    Raw strings carry no identifier and are reported as ``"unknown"``.
    """
    if isinstance(item, Sequence):
        return item.sequence, item.id
    if isinstance(item, str):
        return item, UNKNOWN_ID
    # Duck-typed records from other readers only need the two attributes
    return item.sequence, getattr(item, "id", None) or UNKNOWN_ID
