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

Pairwise alignment of two sequences and edit distances.
"""

import logging

import edlib

from .dp import DEFAULT_MAX_CELLS, align_rows, check_dimensions, score_antidiagonal, score_rolling
from .results import AlignmentResult
from .scoring import DEFAULT_SCORING, AlignmentMode
from .sequence import as_sequence

logger = logging.getLogger(__name__)


def _pairwise_rows(reference):
    """Row symbols and predecessors for a linear reference: row i follows row i-1."""
    row_symbols = [None] + list(reference.residues)
    row_predecessors = [()] + [(i - 1,) for i in range(1, len(reference) + 1)]
    return row_symbols, row_predecessors


def align_pair(reference, query, scoring=None, mode=AlignmentMode.GLOBAL, *,
               max_cells=DEFAULT_MAX_CELLS, cancel=None):
    """
    Compute an optimal alignment of query against reference.

    Args:
        reference (Sequence or str): Reference sequence (DP rows)
        query (Sequence or str): Query sequence (DP columns)
        scoring (ScoringModel, optional): Scores to use. Defaults to DEFAULT_SCORING.
        mode (AlignmentMode): GLOBAL, SEMIGLOBAL (whole reference, free query
                              overhangs) or LOCAL
        max_cells (int, optional): Ceiling on (len(reference)+1) * (len(query)+1);
                                   None disables the check
        cancel: Optional object with is_set() (e.g. threading.Event), checked once per row

    Returns:
        AlignmentResult: Chronological edit operations, score and aligned strings

    Raises:
        EmptySequenceError, InvalidSymbolError: Input cannot be aligned
        DimensionOverflowError: Matrix would exceed max_cells
        AlignmentCancelledError: cancel was set before the alignment finished

    Example:
        >>> result = align_pair("ACGT", "ACGA")
        >>> result.reference_aligned, result.query_aligned, result.score
        ('ACGT', 'ACGA', 2)
    """
    if scoring is None:
        scoring = DEFAULT_SCORING
    mode = AlignmentMode(mode)
    reference = as_sequence(reference, 'reference')
    query = as_sequence(query, 'query')
    scoring.check_sequence(reference)
    scoring.check_sequence(query)
    check_dimensions(len(reference) + 1, len(query) + 1, max_cells)

    logger.debug(
        f"Aligning {query.name} ({len(query)} bp) against {reference.name} "
        f"({len(reference)} bp) in {mode.value} mode"
    )
    row_symbols, row_predecessors = _pairwise_rows(reference)
    score, ops, _, end_row, end_column, _, _ = align_rows(
        row_symbols, row_predecessors, [len(reference)], query.residues, scoring, mode, cancel)

    # Row r of the matrix holds reference residue r-1, so the row the traceback
    # stopped at is the number of unaligned leading reference residues
    return AlignmentResult.from_operations(
        ops, score, reference_start=end_row, query_start=end_column, mode=mode)


def score_pair(reference, query, scoring=None, mode=AlignmentMode.GLOBAL, *,
               workers=None, cancel=None):
    """
    Compute only the optimal alignment score, without a traceback matrix.

    Uses two rolling rows, so memory grows with the shorter sequence for the
    symmetric GLOBAL and LOCAL modes. With workers > 1 the matrix is filled
    along anti-diagonals by a thread pool instead.

    Returns:
        int: The same score align_pair would report
    """
    if scoring is None:
        scoring = DEFAULT_SCORING
    mode = AlignmentMode(mode)
    reference = as_sequence(reference, 'reference')
    query = as_sequence(query, 'query')
    scoring.check_sequence(reference)
    scoring.check_sequence(query)

    rows, columns = reference.residues, query.residues
    if mode is not AlignmentMode.SEMIGLOBAL and len(columns) > len(rows):
        rows, columns = columns, rows

    if workers is not None and workers > 1:
        return score_antidiagonal(rows, columns, scoring, mode, workers, cancel)
    return score_rolling(rows, columns, scoring, mode, cancel)


def levenshtein(reference, query):
    """
    Unit-cost edit distance between two sequences.

    Computed with edlib in global (NW) mode. Symbols are compared exactly, so
    ambiguity codes only match themselves.

    Examples:
        >>> levenshtein("ACGT", "ACGA")
        1
    """
    reference = as_sequence(reference, 'reference')
    query = as_sequence(query, 'query')
    if len(reference) == 0 or len(query) == 0:
        return max(len(reference), len(query))
    result = edlib.align(query.residues, reference.residues, mode="NW", task="distance")
    return result['editDistance']


def hamming_distance(reference, query):
    """
    Number of positions at which two equal-length sequences differ.

    Raises:
        ValueError: Sequences have different lengths
    """
    reference = as_sequence(reference, 'reference')
    query = as_sequence(query, 'query')
    if len(reference) != len(query):
        raise ValueError(
            f"Hamming distance requires sequences of equal length: "
            f"reference={len(reference)}, query={len(query)}"
        )
    return sum(1 for a, b in zip(reference.residues, query.residues) if a != b)
