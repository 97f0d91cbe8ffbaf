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

DNA Sequence Alignment and Mutation Detection

This package aligns DNA sequences and counts the mutations that separate
them. Two sequences are aligned pairwise under global, semiglobal or local
scoring; any number of sequences can be folded into a partial order
alignment (POA) graph whose heaviest path gives a consensus. Alignment traces
are classified into matches, mismatches (ambiguity codes involved),
substitutions, insertions and deletions.

Example:
    >>> from dna_sequence_analysis import align_pair, classify
    >>> report = classify(align_pair("ACGT", "ACGA"))
    >>> report.match, report.substitution
    (3, 1)
"""

from .errors import (
    AlignmentCancelledError,
    AlignmentError,
    DimensionOverflowError,
    EmptySequenceError,
    GraphCycleError,
    InvalidSymbolError,
    ScoringConfigError,
)
from .mutations import MutationReport, classify, classify_operations
from .pairwise import align_pair, hamming_distance, levenshtein, score_pair
from .poa import POAGraph, POANode, build_poa
from .results import (
    DEFAULT_SCORING_FORMAT,
    AlignmentResult,
    EditKind,
    EditOp,
    ScoringFormat,
    format_alignment,
)
from .scoring import DEFAULT_SCORING, AlignmentMode, ScoringModel
from .sequence import (
    GAP,
    IUPAC_ALPHABET,
    IUPAC_CODES,
    Sequence,
    as_sequence,
    is_ambiguous,
    reverse_complement,
)

__version__ = "0.1.0"

__all__ = [
    # sequences
    "GAP",
    "IUPAC_ALPHABET",
    "IUPAC_CODES",
    "Sequence",
    "as_sequence",
    "is_ambiguous",
    "reverse_complement",
    # scoring
    "DEFAULT_SCORING",
    "AlignmentMode",
    "ScoringModel",
    # results
    "DEFAULT_SCORING_FORMAT",
    "AlignmentResult",
    "EditKind",
    "EditOp",
    "ScoringFormat",
    "format_alignment",
    # aligners
    "align_pair",
    "score_pair",
    "levenshtein",
    "hamming_distance",
    "POAGraph",
    "POANode",
    "build_poa",
    # mutations
    "MutationReport",
    "classify",
    "classify_operations",
    # errors
    "AlignmentError",
    "AlignmentCancelledError",
    "DimensionOverflowError",
    "EmptySequenceError",
    "GraphCycleError",
    "InvalidSymbolError",
    "ScoringConfigError",
]
