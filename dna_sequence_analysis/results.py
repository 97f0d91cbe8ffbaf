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

Result types carried between the aligners and the mutation detector.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Tuple

from .sequence import GAP, is_ambiguous

if TYPE_CHECKING:
    from .scoring import AlignmentMode


class EditKind(Enum):
    """One step of an alignment trace."""
    MATCH = 'match'
    SUBSTITUTION = 'substitution'
    INSERTION = 'insertion'        # query residue against a reference gap
    DELETION = 'deletion'          # reference residue against a query gap


@dataclass(frozen=True)
class EditOp:
    """A single aligned column: the operation and the two symbols (GAP on the gapped side)."""
    kind: EditKind
    reference_symbol: str
    query_symbol: str

    @classmethod
    def aligned(cls, reference_symbol, query_symbol):
        kind = EditKind.MATCH if reference_symbol == query_symbol else EditKind.SUBSTITUTION
        return cls(kind, reference_symbol, query_symbol)

    @classmethod
    def insertion(cls, query_symbol):
        return cls(EditKind.INSERTION, GAP, query_symbol)

    @classmethod
    def deletion(cls, reference_symbol):
        return cls(EditKind.DELETION, reference_symbol, GAP)


@dataclass(frozen=True)
class AlignmentResult:
    """Result of aligning a query against a reference sequence or a POA graph.

    Fields:
        operations: Edit operations in chronological (5'->3') order
        score: Optimal alignment score under the ScoringModel used
        reference_aligned: Aligned reference symbols with gap characters
        query_aligned: Aligned query symbols with gap characters
        reference_start, reference_end: Half-open span of the reference covered
            by the alignment. For POA alignments these are topological ranks of
            the graph nodes rather than residue offsets.
        query_start, query_end: Half-open span of the query covered by the alignment
        mode: AlignmentMode the alignment was computed with
        reference_nodes: POA alignments only; graph node id for each operation,
            None for insertions
    """
    operations: Tuple[EditOp, ...]
    score: int
    reference_aligned: str
    query_aligned: str
    reference_start: int
    reference_end: int
    query_start: int
    query_end: int
    mode: Optional["AlignmentMode"] = None
    reference_nodes: Tuple[Optional[int], ...] = ()

    @property
    def aligned_length(self):
        return len(self.operations)

    @classmethod
    def from_operations(cls, operations, score, reference_start, query_start, mode=None,
                        reference_nodes=()):
        """Build a result, deriving the aligned strings and span ends from the operations."""
        operations = tuple(operations)
        reference_aligned = ''.join(op.reference_symbol for op in operations)
        query_aligned = ''.join(op.query_symbol for op in operations)
        reference_consumed = sum(1 for op in operations if op.kind is not EditKind.INSERTION)
        query_consumed = sum(1 for op in operations if op.kind is not EditKind.DELETION)
        return cls(
            operations=operations,
            score=score,
            reference_aligned=reference_aligned,
            query_aligned=query_aligned,
            reference_start=reference_start,
            reference_end=reference_start + reference_consumed,
            query_start=query_start,
            query_end=query_start + query_consumed,
            mode=mode,
            reference_nodes=tuple(reference_nodes),
        )


@dataclass(frozen=True)
class ScoringFormat:
    """Format codes for the alignment midline."""
    match: str = '|'                    # Identical symbols
    ambiguous_mismatch: str = ':'       # Differing symbols, at least one IUPAC ambiguity code
    substitution: str = '.'             # Two different unambiguous nucleotides
    indel: str = ' '                    # Insertion or deletion column

    def __post_init__(self):
        """Validate that all scoring codes are single characters."""
        for field_name, value in self.__dict__.items():
            if not isinstance(value, str) or len(value) != 1:
                raise ValueError(f"Scoring code '{field_name}' must be a single character, got: {value!r}")


DEFAULT_SCORING_FORMAT = ScoringFormat()


def _midline_code(op, scoring_format):
    if op.kind is EditKind.MATCH:
        return scoring_format.match
    if op.kind is EditKind.SUBSTITUTION:
        if is_ambiguous(op.reference_symbol) or is_ambiguous(op.query_symbol):
            return scoring_format.ambiguous_mismatch
        return scoring_format.substitution
    return scoring_format.indel


def format_alignment(result, width=120, scoring_format=None, reference_label='reference',
                     query_label='query'):
    """
    Render an alignment as wrapped blocks of reference, midline and query rows.

    Each row is prefixed with the 1-based position of its first residue and
    suffixed with the position of its last residue, so that a block can be
    located in the original sequences.

    Args:
        result (AlignmentResult): Alignment to render
        width (int): Number of alignment columns per block
        scoring_format (ScoringFormat, optional): Midline codes.
                                                 Defaults to DEFAULT_SCORING_FORMAT.

    Returns:
        str: Rendered alignment, blocks separated by blank lines. Empty alignments
             render as an empty string.
    """
    if width < 1:
        raise ValueError(f"width must be positive, got {width}")
    if scoring_format is None:
        scoring_format = DEFAULT_SCORING_FORMAT

    midline = ''.join(_midline_code(op, scoring_format) for op in result.operations)
    label_width = max(len(reference_label), len(query_label))
    number_width = len(str(max(result.reference_end, result.query_end, 1)))

    blocks = []
    ref_pos, query_pos = result.reference_start, result.query_start
    for offset in range(0, result.aligned_length, width):
        ref_chunk = result.reference_aligned[offset:offset + width]
        query_chunk = result.query_aligned[offset:offset + width]
        ref_residues = len(ref_chunk) - ref_chunk.count(GAP)
        query_residues = len(query_chunk) - query_chunk.count(GAP)

        # Empty chunks (all gaps) report the position of the preceding residue
        ref_first = ref_pos + 1 if ref_residues else ref_pos
        query_first = query_pos + 1 if query_residues else query_pos
        ref_pos += ref_residues
        query_pos += query_residues

        pad = ' ' * (label_width + number_width + 2)
        blocks.append('\n'.join([
            f"{reference_label:<{label_width}} {ref_first:>{number_width}} {ref_chunk} {ref_pos}",
            f"{pad}{midline[offset:offset + width]}",
            f"{query_label:<{label_width}} {query_first:>{number_width}} {query_chunk} {query_pos}",
        ]))
    return '\n\n'.join(blocks)
