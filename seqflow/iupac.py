"""
SeqFlow - IUPAC Nucleotide Codes

Expansion of IUPAC ambiguity codes into the concrete bases they stand for.

    R = A/G   (puRine)        Y = C/T   (pYrimidine)
    S = G/C   (Strong)        W = A/T   (Weak)
    K = G/T   (Keto)          M = A/C   (aMino)
    B = not A                 D = not C
    H = not G                 V = not T
    N = any base
"""

from typing import Dict, FrozenSet

from .errors import ConfigurationError


AMBIGUITY_CODES = "RYSWKMBDHVN"

IUPAC_CODES: Dict[str, FrozenSet[str]] = {
    'A': frozenset('A'),
    'C': frozenset('C'),
    'G': frozenset('G'),
    'T': frozenset('T'),
    'U': frozenset('U'),
    'R': frozenset('AG'),
    'Y': frozenset('CT'),
    'S': frozenset('GC'),
    'W': frozenset('AT'),
    'K': frozenset('GT'),
    'M': frozenset('AC'),
    'B': frozenset('CGT'),
    'D': frozenset('AGT'),
    'H': frozenset('ACT'),
    'V': frozenset('ACG'),
    'N': frozenset('ACGT'),
}


def expand_ambiguous(base: str) -> FrozenSet[str]:
    """
    Return the set of concrete bases an IUPAC code represents.

    Lookup is case-insensitive. Characters outside the IUPAC alphabet
    expand to themselves (upper-cased), so they are only compatible with
    an identical character.

    Raises:
        ConfigurationError: If ``base`` is not a single character
    """
    if len(base) != 1:
        raise ConfigurationError(f"Base must be a single character, got '{base}'")
    upper = base.upper()
    expanded = IUPAC_CODES.get(upper)
    if expanded is None:
        return frozenset(upper)
    return expanded


def is_ambiguous(base: str) -> bool:
    """Check whether a single character is an ambiguity code."""
    return len(base) == 1 and base.upper() in AMBIGUITY_CODES


def has_ambiguous(text: str) -> bool:
    """Check whether any character of ``text`` is an ambiguity code."""
    return any(is_ambiguous(c) for c in text)


def bases_compatible(text_base: str, pattern_base: str) -> bool:
    """
    Check whether two bases can denote the same nucleotide.

    ``N`` on either side is compatible with anything; otherwise the two
    expansions must share at least one concrete base.
    """
    if text_base in 'Nn' or pattern_base in 'Nn':
        return True
    return not expand_ambiguous(pattern_base).isdisjoint(expand_ambiguous(text_base))
