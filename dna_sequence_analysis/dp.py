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

Dynamic programming engine shared by the pairwise and partial order aligners.

The engine aligns a query against a set of "rows". For a pairwise alignment
the rows are the reference residues and every row's only predecessor is the
row above it. For a POA graph the rows are graph nodes in topological order
and a row's predecessors are the node's graph predecessors. Row 0 is the
virtual empty prefix in both cases, so a single fill and traceback routine
serves both aligners.

Three Gotoh layers are kept per cell: H (best score), U (alignment ends with
a deletion, i.e. a move "up" from a predecessor row) and L (alignment ends
with an insertion, a move "left" along the query). Linear gap costs are the
special case of a zero opening cost.

The layers are numpy arrays: int32 scores and uint8 direction codes. The up
and diagonal candidates of a row only read predecessor rows and are computed
for the whole row at once; the left layer runs along the row.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .errors import AlignmentCancelledError, DimensionOverflowError
from .results import EditOp
from .scoring import DIAGONAL, EXTEND, LEFT, NEG_INF, OPEN, STOP, UP

logger = logging.getLogger(__name__)

SCORE_DTYPE = np.int32
CODE_DTYPE = np.uint8

# Three score layers and three direction code layers
BYTES_PER_CELL = 3 * np.dtype(SCORE_DTYPE).itemsize + 3 * np.dtype(CODE_DTYPE).itemsize

# About 1 GiB of score and traceback layers
DEFAULT_MAX_CELLS = (1 << 30) // BYTES_PER_CELL


def check_dimensions(rows, columns, max_cells):
    """Raise DimensionOverflowError when a rows x columns matrix exceeds max_cells."""
    if max_cells is not None and rows * columns > max_cells:
        raise DimensionOverflowError(rows, columns, max_cells)


def _check_cancel(cancel):
    if cancel is not None and cancel.is_set():
        raise AlignmentCancelledError("Alignment cancelled by caller")


def encode(residues):
    """View residues as a uint8 array of ASCII codes."""
    return np.frombuffer(residues.encode('ascii'), dtype=np.uint8)


@dataclass
class DPTables:
    """
    Score and traceback layers of one fill.

    h, u and l are int32 arrays of shape (rows, columns + 1) and the code
    layers are uint8 arrays of the same shape. h_from and u_from hold the
    chosen predecessor row for rows with more than one predecessor; for
    single-predecessor rows the entry is None and the traceback uses that
    predecessor directly.
    """
    h: np.ndarray
    u: np.ndarray
    l: np.ndarray
    h_code: np.ndarray
    u_code: np.ndarray
    l_code: np.ndarray
    h_from: List[Optional[np.ndarray]]
    u_from: List[Optional[np.ndarray]]


def fill(row_symbols, row_predecessors, query, scoring, mode, cancel=None):
    """
    Fill the DP layers for query against the given rows.

    Args:
        row_symbols: Symbol per row; index 0 is the virtual empty row and is ignored
        row_predecessors: For each row r >= 1, the predecessor rows in increasing
                          order (0 for rows that may start an alignment path)
        query (str): Query residues (columns 1..len(query))
        scoring (ScoringModel): Substitution and gap scores
        mode (AlignmentMode): Boundary and floor policy
        cancel: Optional object with is_set(), checked once per row

    Returns:
        DPTables
    """
    gap_open, gap_extend = scoring.gap_costs
    open_cost = gap_open + gap_extend
    columns = len(query)
    rows = len(row_symbols)
    zero_floor = mode.zero_floor
    query_codes = encode(query)

    shape = (rows, columns + 1)
    h = np.zeros(shape, dtype=SCORE_DTYPE)
    u = np.full(shape, NEG_INF, dtype=SCORE_DTYPE)
    l = np.full(shape, NEG_INF, dtype=SCORE_DTYPE)
    h_code = np.zeros(shape, dtype=CODE_DTYPE)
    u_code = np.zeros(shape, dtype=CODE_DTYPE)
    l_code = np.zeros(shape, dtype=CODE_DTYPE)
    h_from = [None] * rows
    u_from = [None] * rows

    # Row 0: empty reference prefix
    h_left, l_left = 0, NEG_INF
    for j in range(1, columns + 1):
        h_left, l_left, h_code[0, j], l_code[0, j] = mode.top_row(
            h_left, l_left, gap_open, gap_extend)
        h[0, j], l[0, j] = h_left, l_left

    for r in range(1, rows):
        _check_cancel(cancel)
        preds = row_predecessors[r]
        substitution = scoring.substitution_scores(ord(row_symbols[r]), query_codes)

        # Up: row r's symbol against a query gap, entered from a predecessor row.
        # Ties keep the earlier (lower) predecessor and prefer opening a gap.
        up = np.full(columns + 1, NEG_INF, dtype=np.int64)
        up_kind = np.zeros(columns + 1, dtype=CODE_DTYPE)
        up_from = np.full(columns + 1, preds[0], dtype=np.int64)
        diagonal = np.full(columns, NEG_INF, dtype=np.int64)
        diagonal_from = np.full(columns, preds[0], dtype=np.int64)
        for p in preds:
            opened = h[p].astype(np.int64) + open_cost
            extended = u[p].astype(np.int64) + gap_extend
            value = np.maximum(opened, extended)
            better = value > up
            up = np.where(better, value, up)
            up_kind = np.where(better, (extended > opened).astype(CODE_DTYPE), up_kind)
            up_from = np.where(better, p, up_from)

            value = h[p, :-1].astype(np.int64) + substitution
            better = value > diagonal
            diagonal = np.where(better, value, diagonal)
            diagonal_from = np.where(better, p, diagonal_from)

        u[r, 1:] = up[1:]
        u_code[r, 1:] = up_kind[1:]
        if not mode.free_reference_ends:
            # First column: the reference prefix is paid for as a leading gap
            u[r, 0] = h[r, 0] = up[0]
            u_code[r, 0] = up_kind[0]
            h_code[r, 0] = UP

        up_row = up.tolist()
        diagonal_row = diagonal.tolist()
        h_row = [int(h[r, 0])] + [0] * columns
        l_row = [NEG_INF] * (columns + 1)
        h_codes = [STOP] * (columns + 1)
        l_codes = [OPEN] * (columns + 1)
        for j in range(1, columns + 1):
            # Left: query residue against a reference gap
            opened = h_row[j - 1] + open_cost
            extended = l_row[j - 1] + gap_extend
            if opened >= extended:
                l_row[j] = opened
            else:
                l_row[j], l_codes[j] = extended, EXTEND

            # Ties prefer diagonal, then up, then left
            best, code = diagonal_row[j - 1], DIAGONAL
            if up_row[j] > best:
                best, code = up_row[j], UP
            if l_row[j] > best:
                best, code = l_row[j], LEFT
            if zero_floor and best <= 0:
                best, code = 0, STOP
            h_row[j] = best
            h_codes[j] = code

        h[r, 1:] = h_row[1:]
        l[r, 1:] = l_row[1:]
        h_code[r, 1:] = h_codes[1:]
        l_code[r, 1:] = l_codes[1:]
        if len(preds) > 1:
            h_from[r] = np.concatenate(([preds[0]], diagonal_from)).astype(np.int32)
            u_from[r] = up_from.astype(np.int32)

    return DPTables(h, u, l, h_code, u_code, l_code, h_from, u_from)


def traceback(tables, row_symbols, row_predecessors, query, start_row, start_column):
    """
    Walk the direction codes backwards from a start cell.

    Returns:
        tuple: (operations, rows, end_row, end_column) where operations are in
        chronological order, rows gives the DP row consumed by each operation
        (None for insertions) and (end_row, end_column) is the cell the walk
        stopped at, i.e. the prefix lengths left unaligned.
    """
    ops = []
    op_rows = []
    r, j = start_row, start_column
    state = 'H'
    while True:
        if state == 'H':
            code = tables.h_code[r, j]
            if code == STOP:
                break
            if code == DIAGONAL:
                ops.append(EditOp.aligned(row_symbols[r], query[j - 1]))
                op_rows.append(r)
                from_rows = tables.h_from[r]
                r = int(from_rows[j]) if from_rows is not None else row_predecessors[r][0]
                j -= 1
            elif code == UP:
                state = 'U'
            else:
                state = 'L'
        elif state == 'U':
            ops.append(EditOp.deletion(row_symbols[r]))
            op_rows.append(r)
            kind = tables.u_code[r, j]
            from_rows = tables.u_from[r]
            r = int(from_rows[j]) if from_rows is not None else row_predecessors[r][0]
            state = 'H' if kind == OPEN else 'U'
        else:
            ops.append(EditOp.insertion(query[j - 1]))
            op_rows.append(None)
            kind = tables.l_code[r, j]
            j -= 1
            state = 'H' if kind == OPEN else 'L'

    ops.reverse()
    op_rows.reverse()
    return ops, op_rows, r, j


def align_rows(row_symbols, row_predecessors, end_rows, query, scoring, mode, cancel=None):
    """
    Fill and trace back in one call.

    Returns:
        tuple: (score, operations, rows, end_row, end_column, start_row, start_column)
    """
    tables = fill(row_symbols, row_predecessors, query, scoring, mode, cancel)
    start_row, start_column, score = mode.select_start(tables.h, end_rows, len(query))
    logger.debug(f"Traceback starts at row {start_row}, column {start_column} with score {score}")
    ops, op_rows, end_row, end_column = traceback(
        tables, row_symbols, row_predecessors, query, start_row, start_column)
    return score, ops, op_rows, end_row, end_column, start_row, start_column


def score_rolling(reference, query, scoring, mode, cancel=None):
    """
    Optimal pairwise score using two rolling rows per layer (no traceback).

    Memory is O(len(query)); callers place the shorter sequence on the query
    side when the mode is symmetric.
    """
    gap_open, gap_extend = scoring.gap_costs
    open_cost = gap_open + gap_extend
    columns = len(query)
    zero_floor = mode.zero_floor
    query_codes = encode(query)

    top = [0] * (columns + 1)
    l_left = NEG_INF
    for j in range(1, columns + 1):
        top[j], l_left, _, _ = mode.top_row(top[j - 1], l_left, gap_open, gap_extend)
    prev_h = np.array(top, dtype=np.int64)
    prev_u = np.full(columns + 1, NEG_INF, dtype=np.int64)

    best = int(prev_h.max()) if zero_floor else None
    for symbol in reference:
        _check_cancel(cancel)
        up = np.maximum(prev_h + open_cost, prev_u + gap_extend)
        if mode.free_reference_ends:
            up[0] = NEG_INF
        diagonal = (prev_h[:-1] + scoring.substitution_scores(ord(symbol), query_codes)).tolist()
        up_row = up.tolist()

        cur_h = [0] * (columns + 1)
        if not mode.free_reference_ends:
            cur_h[0] = up_row[0]
        left = NEG_INF
        for j in range(1, columns + 1):
            left = max(cur_h[j - 1] + open_cost, left + gap_extend)
            value = max(diagonal[j - 1], up_row[j], left)
            if zero_floor and value < 0:
                value = 0
            cur_h[j] = value
        if zero_floor:
            best = max(best, max(cur_h))
        prev_h, prev_u = np.array(cur_h, dtype=np.int64), up

    if zero_floor:
        return best
    if mode.free_query_ends:
        return int(prev_h.max())
    return int(prev_h[columns])


def score_antidiagonal(reference, query, scoring, mode, workers, cancel=None):
    """
    Optimal pairwise score filled one anti-diagonal at a time.

    Cells on an anti-diagonal depend only on the two previous diagonals, so
    each diagonal is split into chunks computed by a thread pool; collecting
    every chunk's result before moving on is the barrier between diagonals.
    """
    gap_open, gap_extend = scoring.gap_costs
    open_cost = gap_open + gap_extend
    rows, columns = len(reference), len(query)
    zero_floor = mode.zero_floor
    free_reference_ends = mode.free_reference_ends
    reference_codes = encode(reference)
    query_codes = encode(query)

    # Diagonal buffers indexed by row
    h_prev2 = np.zeros(rows + 1, dtype=np.int64)
    h_prev = np.zeros(rows + 1, dtype=np.int64)
    h_cur = np.zeros(rows + 1, dtype=np.int64)
    u_prev = np.full(rows + 1, NEG_INF, dtype=np.int64)
    u_cur = np.full(rows + 1, NEG_INF, dtype=np.int64)
    l_prev = np.full(rows + 1, NEG_INF, dtype=np.int64)
    l_cur = np.full(rows + 1, NEG_INF, dtype=np.int64)

    def compute(first, last, diagonal):
        chunk_best = NEG_INF
        if first == 0:
            # Top row cell (0, diagonal)
            h_value, l_value, _, _ = mode.top_row(
                int(h_prev[0]), int(l_prev[0]), gap_open, gap_extend)
            h_cur[0], u_cur[0], l_cur[0] = h_value, NEG_INF, l_value
            if zero_floor:
                chunk_best = max(chunk_best, h_value)
            first = 1
        if last == diagonal and first <= last:
            # First column cell (diagonal, 0)
            if free_reference_ends:
                h_value, u_value = 0, NEG_INF
            else:
                u_value = max(int(h_prev[last - 1]) + open_cost, int(u_prev[last - 1]) + gap_extend)
                h_value = u_value
            h_cur[last], u_cur[last], l_cur[last] = h_value, u_value, NEG_INF
            if zero_floor or last == rows:
                chunk_best = max(chunk_best, h_value)
            last -= 1
        if first <= last:
            cells = slice(first, last + 1)
            above = slice(first - 1, last)
            u_value = np.maximum(h_prev[above] + open_cost, u_prev[above] + gap_extend)
            l_value = np.maximum(h_prev[cells] + open_cost, l_prev[cells] + gap_extend)
            # Query columns decrease as the row grows along a diagonal
            query_part = query_codes[diagonal - last - 1:diagonal - first][::-1]
            substitution = scoring.substitution_scores(reference_codes[above], query_part)
            h_value = np.maximum(np.maximum(h_prev2[above] + substitution, u_value), l_value)
            if zero_floor:
                h_value = np.maximum(h_value, 0)
            h_cur[cells], u_cur[cells], l_cur[cells] = h_value, u_value, l_value
            if zero_floor:
                chunk_best = max(chunk_best, int(h_value.max()))
            elif first <= rows <= last:
                chunk_best = max(chunk_best, int(h_value[rows - first]))
        return chunk_best

    best = 0 if zero_floor else NEG_INF
    with ThreadPoolExecutor(max_workers=workers) as executor:
        for diagonal in range(1, rows + columns + 1):
            _check_cancel(cancel)
            low, high = max(0, diagonal - columns), min(rows, diagonal)
            size = high - low + 1
            step = max(1, -(-size // workers))
            chunks = [(start, min(high, start + step - 1)) for start in range(low, high + 1, step)]
            results = list(executor.map(lambda bounds: compute(bounds[0], bounds[1], diagonal), chunks))
            if zero_floor or (mode.free_query_ends and low <= rows <= high):
                best = max([best] + results)
            h_prev2, h_prev, h_cur = h_prev, h_cur, h_prev2
            u_prev, u_cur = u_cur, u_prev
            l_prev, l_cur = l_cur, l_prev

    if zero_floor or mode.free_query_ends:
        # The last row's column 0 sits on diagonal `rows` and is included above
        return int(best)
    return int(h_prev[rows])
