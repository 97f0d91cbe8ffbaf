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

Mutation counts derived from an alignment trace.

Classification policy for aligned columns with differing symbols:

- substitution: both symbols are unambiguous nucleotides (A, C, G, T, U),
  e.g. T aligned to A
- mismatch: at least one symbol is an IUPAC ambiguity code, e.g. N aligned to
  A or R aligned to Y. The true base is unknown, so the column is not counted
  as a confirmed substitution.

Identical symbols (including two identical ambiguity codes) are matches.
"""

from dataclasses import dataclass

from .results import EditKind
from .sequence import is_ambiguous


@dataclass(frozen=True)
class MutationReport:
    """Per-category column counts of one alignment."""
    match: int = 0
    mismatch: int = 0
    substitution: int = 0
    insertion: int = 0
    deletion: int = 0

    @property
    def total(self):
        return self.match + self.mismatch + self.substitution + self.insertion + self.deletion

    @property
    def identity(self):
        """Fraction of aligned columns that are matches (0.0 for an empty alignment)."""
        return self.match / self.total if self.total else 0.0


def classify_operations(operations):
    """Tally edit operations into a MutationReport."""
    counts = {
        'match': 0,
        'mismatch': 0,
        'substitution': 0,
        'insertion': 0,
        'deletion': 0,
    }
    for op in operations:
        if op.kind is EditKind.MATCH:
            counts['match'] += 1
        elif op.kind is EditKind.SUBSTITUTION:
            if is_ambiguous(op.reference_symbol) or is_ambiguous(op.query_symbol):
                counts['mismatch'] += 1
            else:
                counts['substitution'] += 1
        elif op.kind is EditKind.INSERTION:
            counts['insertion'] += 1
        else:
            counts['deletion'] += 1
    return MutationReport(**counts)


def classify(result):
    """
    Count the mutations of an alignment.

    Args:
        result (AlignmentResult): Pairwise or POA alignment

    Returns:
        MutationReport: match/mismatch/substitution/insertion/deletion counts;
        total equals the number of aligned columns
    """
    return classify_operations(result.operations)
