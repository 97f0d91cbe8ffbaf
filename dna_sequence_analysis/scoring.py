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

Scoring configuration and alignment mode strategies.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from .errors import EmptySequenceError, InvalidSymbolError, ScoringConfigError
from .results import EditKind
from .sequence import GAP, IUPAC_ALPHABET

# Unreachable-cell sentinel; fits an int32 layer with room for gap arithmetic
NEG_INF = -(2 ** 30)

DEFAULT_GAP_PENALTY = -2

# Traceback codes for the H (best score) layer
STOP, DIAGONAL, UP, LEFT = 0, 1, 2, 3
# Traceback codes for the U and L gap layers
OPEN, EXTEND = 0, 1


@dataclass(frozen=True)
class ScoringModel:
    """
    Substitution and gap scores shared by every alignment call.

    Attributes:
        match_score: Reward for aligning two identical symbols
        mismatch_penalty: Score for aligning two different symbols (typically negative)
        gap_penalty: Score per gap symbol when gap costs are linear
        gap_open: Affine gap opening score. A gap run of length k scores
                  gap_open + k * gap_extend. Must be given together with gap_extend;
                  gap_penalty is not used when affine costs are set.
        gap_extend: Affine gap extension score, charged for every gap symbol
        alphabet: Symbols accepted in input sequences (IUPAC nucleotides by default)
    """
    match_score: int = 1
    mismatch_penalty: int = -1
    gap_penalty: int = DEFAULT_GAP_PENALTY
    gap_open: Optional[int] = None
    gap_extend: Optional[int] = None
    alphabet: str = IUPAC_ALPHABET

    def __post_init__(self):
        """Validate parameter combinations."""
        object.__setattr__(self, 'alphabet', self.alphabet.upper())
        if self.match_score <= self.mismatch_penalty:
            raise ScoringConfigError(
                f"match_score ({self.match_score}) must be greater than "
                f"mismatch_penalty ({self.mismatch_penalty})"
            )
        if self.gap_penalty > 0:
            raise ScoringConfigError(f"gap_penalty must not be positive, got {self.gap_penalty}")
        if (self.gap_open is None) != (self.gap_extend is None):
            raise ScoringConfigError(
                "Contradictory configuration: gap_open and gap_extend must be set together, "
                f"got gap_open={self.gap_open}, gap_extend={self.gap_extend}"
            )
        if self.gap_open is not None:
            if self.gap_penalty != DEFAULT_GAP_PENALTY:
                raise ScoringConfigError(
                    f"Contradictory configuration: gap_penalty={self.gap_penalty} is not used "
                    "when gap_open and gap_extend are set"
                )
            if self.gap_open > 0:
                raise ScoringConfigError(f"gap_open must not be positive, got {self.gap_open}")
            if self.gap_extend >= 0:
                raise ScoringConfigError(
                    f"gap_extend must be negative so that gaps have a cost, got {self.gap_extend}"
                )
        if not self.alphabet:
            raise ScoringConfigError("alphabet must not be empty")
        if GAP in self.alphabet:
            raise ScoringConfigError(f"alphabet must not contain the gap character {GAP!r}")

    @property
    def is_affine(self):
        return self.gap_open is not None

    @property
    def gap_costs(self):
        """(open, extend) pair; linear gaps are the affine case with a zero opening cost."""
        if self.is_affine:
            return self.gap_open, self.gap_extend
        return 0, self.gap_penalty

    def substitution_score(self, reference_symbol, query_symbol):
        if reference_symbol == query_symbol:
            return self.match_score
        return self.mismatch_penalty

    def substitution_scores(self, reference_codes, query_codes):
        """Element-wise substitution scores of two uint8-encoded symbol arrays (broadcasting)."""
        return np.where(np.equal(reference_codes, query_codes),
                        self.match_score, self.mismatch_penalty)

    def gap_score(self, length):
        if length <= 0:
            return 0
        gap_open, gap_extend = self.gap_costs
        return gap_open + length * gap_extend

    def check_sequence(self, sequence):
        """Raise EmptySequenceError or InvalidSymbolError unless the sequence can be aligned."""
        if len(sequence) == 0:
            raise EmptySequenceError(sequence.name)
        allowed = set(self.alphabet)
        for position, symbol in enumerate(sequence.residues):
            if symbol not in allowed:
                raise InvalidSymbolError(sequence.name, symbol, position)

    def score_operations(self, operations):
        """
        Score an edit trace from scratch.

        Consecutive insertions (or consecutive deletions) form one gap run and
        pay the opening cost once; a deletion run directly following an
        insertion run is a separate gap.
        """
        total = 0
        run_kind = None
        run_length = 0
        for op in operations:
            if op.kind in (EditKind.INSERTION, EditKind.DELETION):
                if op.kind is run_kind:
                    run_length += 1
                    continue
                total += self.gap_score(run_length)
                run_kind, run_length = op.kind, 1
                continue
            total += self.gap_score(run_length)
            run_kind, run_length = None, 0
            total += self.substitution_score(op.reference_symbol, op.query_symbol)
        return total + self.gap_score(run_length)


DEFAULT_SCORING = ScoringModel()


class AlignmentMode(Enum):
    """
    Boundary and traceback policy for the DP engine.

    GLOBAL aligns both sequences end to end. SEMIGLOBAL aligns the whole
    reference (or a full start-to-end path of a POA graph) but leaves the
    query's leading and trailing overhangs unpenalised. LOCAL aligns the best
    scoring pair of substrings.
    """
    GLOBAL = 'global'
    SEMIGLOBAL = 'semiglobal'
    LOCAL = 'local'

    @property
    def zero_floor(self):
        return self is AlignmentMode.LOCAL

    @property
    def free_reference_ends(self):
        return self is AlignmentMode.LOCAL

    @property
    def free_query_ends(self):
        return self is not AlignmentMode.GLOBAL

    def top_row(self, h_left, l_left, gap_open, gap_extend):
        """
        Return (H, L, H code, L code) for a row 0 cell given its left neighbour.

        Row 0 is the empty reference prefix: the query prefix is either paid
        for as one leading gap or skipped for free.
        """
        if self.free_query_ends:
            return 0, NEG_INF, STOP, OPEN
        opened = h_left + gap_open + gap_extend
        extended = l_left + gap_extend
        if opened >= extended:
            return opened, opened, LEFT, OPEN
        return extended, extended, LEFT, EXTEND

    def select_start(self, scores, end_rows, columns):
        """
        Choose the traceback start cell.

        Args:
            scores (np.ndarray): H layer, one row per DP row (row 0 is the
                                 virtual empty row)
            end_rows: Rows allowed to end the reference side of the alignment,
                      in increasing topological order
            columns: Number of query symbols (last column index)

        Returns:
            tuple: (row, column, score) as Python ints
        """
        end_rows = list(end_rows)
        if self is AlignmentMode.GLOBAL:
            last_column = scores[end_rows, columns]
            index = int(np.argmax(last_column))
            return end_rows[index], columns, int(last_column[index])

        if self is AlignmentMode.SEMIGLOBAL:
            # Ties prefer the longest query prefix, then the earliest row
            candidates = scores[end_rows]
            best = candidates.max()
            hit_rows, hit_columns = np.nonzero(candidates == best)
            column = int(hit_columns.max())
            row = end_rows[int(hit_rows[hit_columns == column].min())]
            return row, column, int(best)

        # First maximal cell in row-major order; no positive cell means an empty alignment
        flat = int(np.argmax(scores))
        row, column = divmod(flat, scores.shape[1])
        if scores[row, column] <= 0:
            return 0, 0, 0
        return row, column, int(scores[row, column])
