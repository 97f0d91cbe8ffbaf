#!/usr/bin/env python3
"""
Copyright (c) 2025, Josh Walker

Redistribution and use in source and binary forms, with or without
modification, are permitted provided that the following conditions are met:

1. Redistributions of source code must retain the above copyright notice, this
   list of conditions and the following disclaimer.

2. Redistributions in binary form must reproduce the above copyright notice,
   this list of conditions and the following disclaimer in the documentation
   and/or other materials provided with the distribution.

THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE
DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE LIABLE
FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL
DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR
SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY,
OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE
OF THIS SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.

Nucleotide sequences and the IUPAC alphabet.
"""

from dataclasses import dataclass

# Complement table for str.translate, covering IUPAC codes in both cases
_RC_TRANSLATE_TABLE = str.maketrans(
    'ATGCURYSWKMBDHVNatgcuryswkmbdhvn-',
    'TACGAYRSWMKVHDBNtacgayrswmkvhdbn-'
)

GAP = '-'

# IUPAC nucleotide ambiguity codes
IUPAC_CODES = {
    'A': {'A'},
    'C': {'C'},
    'G': {'G'},
    'T': {'T'},
    'U': {'U'},
    'R': {'A', 'G'},      # puRine
    'Y': {'C', 'T'},      # pYrimidine
    'S': {'G', 'C'},      # Strong (3 H bonds)
    'W': {'A', 'T'},      # Weak (2 H bonds)
    'K': {'G', 'T'},      # Keto
    'M': {'A', 'C'},      # aMino
    'B': {'C', 'G', 'T'}, # not A
    'D': {'A', 'G', 'T'}, # not C
    'H': {'A', 'C', 'T'}, # not G
    'V': {'A', 'C', 'G'}, # not T
    'N': {'A', 'C', 'G', 'T'}, # aNy
}

IUPAC_ALPHABET = ''.join(IUPAC_CODES)
UNAMBIGUOUS_NUCLEOTIDES = frozenset('ACGTU')


def is_ambiguous(symbol):
    """
    Check whether a symbol is an IUPAC ambiguity code rather than a concrete base.

    Gap characters and symbols outside the IUPAC table are not ambiguity codes.

    Examples:
        >>> is_ambiguous('N')
        True
        >>> is_ambiguous('a')
        False
    """
    symbol = symbol.upper()
    return symbol in IUPAC_CODES and symbol not in UNAMBIGUOUS_NUCLEOTIDES


def reverse_complement(residues):
    """
    Generate reverse complement of DNA sequence with full IUPAC support.

    Handles all standard nucleotides (ATGC, U read as RNA) and IUPAC ambiguity
    codes. Unknown characters are left unchanged.

    Args:
        residues (str): DNA sequence to reverse complement

    Returns:
        str: Reverse complement sequence

    Examples:
        >>> reverse_complement('ATCG')
        'CGAT'
        >>> reverse_complement('ATCGRGTC')  # R = A/G, becomes Y = C/T
        'GACYCGAT'
    """
    return residues.translate(_RC_TRANSLATE_TABLE)[::-1]


@dataclass(frozen=True)
class Sequence:
    """
    An immutable named nucleotide sequence.

    Residues are stored upper-cased; the alphabet is checked by the aligners
    against the ScoringModel in use, not here.
    """
    name: str
    residues: str

    def __post_init__(self):
        object.__setattr__(self, 'residues', self.residues.upper())

    def __len__(self):
        return len(self.residues)

    def __iter__(self):
        return iter(self.residues)

    def __getitem__(self, index):
        return self.residues[index]

    def __str__(self):
        return self.residues

    def reverse_complement(self):
        return Sequence(f"{self.name} (reverse complement)", reverse_complement(self.residues))


def as_sequence(value, default_name='sequence'):
    """Coerce a plain string into a Sequence; Sequence instances pass through."""
    if isinstance(value, Sequence):
        return value
    if isinstance(value, str):
        return Sequence(default_name, value)
    raise TypeError(f"Expected Sequence or str, got {type(value).__name__}")
