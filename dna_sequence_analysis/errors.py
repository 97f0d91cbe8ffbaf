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

Exception types raised by the alignment core.

Every failure of the core is raised as a subclass of AlignmentError so that
callers (the command line front end in particular) can map them onto exit
codes without inspecting messages.
"""


class AlignmentError(Exception):
    """Base class for all errors raised by dna_sequence_analysis."""


class InvalidSymbolError(AlignmentError, ValueError):
    """A sequence contains a character outside the configured alphabet."""

    def __init__(self, sequence_name, symbol, position):
        self.sequence_name = sequence_name
        self.symbol = symbol
        self.position = position
        super().__init__(
            f"Sequence '{sequence_name}' contains invalid symbol {symbol!r} at position {position}"
        )


class EmptySequenceError(AlignmentError, ValueError):
    """A sequence with no residues was passed to an aligner."""

    def __init__(self, sequence_name):
        self.sequence_name = sequence_name
        super().__init__(f"Sequence '{sequence_name}' is empty")


class ScoringConfigError(AlignmentError, ValueError):
    """The scoring parameters form a contradictory or meaningless combination."""


class DimensionOverflowError(AlignmentError, MemoryError):
    """The requested DP matrix exceeds the configured cell ceiling."""

    def __init__(self, rows, columns, max_cells):
        self.rows = rows
        self.columns = columns
        self.max_cells = max_cells
        super().__init__(
            f"Alignment matrix of {rows}x{columns} cells exceeds the limit of {max_cells} cells"
        )


class GraphCycleError(AlignmentError, RuntimeError):
    """The partial order graph would stop being acyclic (builder bug)."""


class AlignmentCancelledError(AlignmentError):
    """The caller signalled cancellation while an alignment was running."""
