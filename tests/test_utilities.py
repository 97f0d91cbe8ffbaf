#!/usr/bin/env python3
"""
Tests for utility functions and helper classes.

Tests the sequence helpers, the scoring model, the result dataclasses and
alignment formatting.
"""

import dataclasses

import pytest
from dna_sequence_analysis import (
    DEFAULT_SCORING,
    GAP,
    IUPAC_ALPHABET,
    IUPAC_CODES,
    AlignmentResult,
    EditKind,
    EditOp,
    ScoringConfigError,
    ScoringFormat,
    ScoringModel,
    Sequence,
    align_pair,
    as_sequence,
    format_alignment,
    is_ambiguous,
    reverse_complement,
)


class TestDataClasses:
    """Test the dataclasses used in the package."""

    def test_scoring_model_defaults(self):
        """Test default ScoringModel values."""
        scoring = ScoringModel()
        assert scoring.match_score == 1
        assert scoring.mismatch_penalty == -1
        assert scoring.gap_penalty == -2
        assert scoring.is_affine is False
        assert scoring.gap_costs == (0, -2)
        assert scoring.alphabet == IUPAC_ALPHABET
        assert DEFAULT_SCORING == scoring

    def test_scoring_model_affine(self):
        """Test affine gap configuration."""
        scoring = ScoringModel(gap_open=-5, gap_extend=-1)
        assert scoring.is_affine is True
        assert scoring.gap_costs == (-5, -1)
        assert scoring.gap_score(1) == -6
        assert scoring.gap_score(3) == -8
        assert scoring.gap_score(0) == 0

    def test_linear_gap_score(self):
        assert ScoringModel(gap_penalty=-3).gap_score(4) == -12

    @pytest.mark.parametrize("kwargs", [
        dict(match_score=-1, mismatch_penalty=-1),
        dict(match_score=0, mismatch_penalty=1),
        dict(gap_penalty=1),
        dict(gap_open=-5),
        dict(gap_extend=-1),
        dict(gap_open=2, gap_extend=-1),
        dict(gap_open=-5, gap_extend=0),
        dict(alphabet=""),
        dict(alphabet="ACGT-"),
        dict(gap_penalty=-3, gap_open=-5, gap_extend=-1),
    ])
    def test_scoring_model_validation(self, kwargs):
        """Test that contradictory scoring parameters are rejected."""
        with pytest.raises(ScoringConfigError):
            ScoringModel(**kwargs)

    def test_scoring_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            ScoringModel(match_score=-2)

    def test_scoring_format_defaults(self):
        """Test default ScoringFormat values."""
        fmt = ScoringFormat()
        assert fmt.match == '|'
        assert fmt.ambiguous_mismatch == ':'
        assert fmt.substitution == '.'
        assert fmt.indel == ' '

    def test_scoring_format_validation(self):
        """Test ScoringFormat validation."""
        fmt = ScoringFormat(match='*', substitution='X')
        assert fmt.match == '*'
        assert fmt.substitution == 'X'

        with pytest.raises(ValueError, match="single character"):
            ScoringFormat(match="too_long")

        with pytest.raises(ValueError, match="single character"):
            ScoringFormat(indel="")

    def test_alignment_result_immutable(self):
        """Test that AlignmentResult is immutable (frozen)."""
        result = align_pair("ACGT", "ACGT")
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.score = 0

    def test_alignment_result_from_operations(self):
        ops = [
            EditOp.aligned('A', 'A'),
            EditOp.insertion('C'),
            EditOp.aligned('G', 'T'),
            EditOp.deletion('T'),
        ]
        result = AlignmentResult.from_operations(ops, score=-4, reference_start=2, query_start=1)
        assert result.reference_aligned == "A-GT"
        assert result.query_aligned == "ACT-"
        assert (result.reference_start, result.reference_end) == (2, 5)
        assert (result.query_start, result.query_end) == (1, 4)
        assert result.aligned_length == 4
        assert [op.kind for op in result.operations] == [
            EditKind.MATCH, EditKind.INSERTION, EditKind.SUBSTITUTION, EditKind.DELETION]


class TestSequences:
    """Test the Sequence type and its helpers."""

    def test_upper_cased(self):
        sequence = Sequence("read", "acgt")
        assert sequence.residues == "ACGT"
        assert len(sequence) == 4
        assert str(sequence) == "ACGT"
        assert sequence[1] == 'C'
        assert list(sequence) == ['A', 'C', 'G', 'T']

    def test_reverse_complement(self):
        assert reverse_complement('ATCG') == 'CGAT'
        assert reverse_complement('ATCGRGTC') == 'GACYCGAT'
        assert reverse_complement('AAAN') == 'NTTT'

    def test_sequence_reverse_complement(self):
        rc = Sequence("read", "AACG").reverse_complement()
        assert rc.residues == "CGTT"
        assert rc.name == "read (reverse complement)"

    def test_as_sequence(self):
        sequence = Sequence("ref", "ACGT")
        assert as_sequence(sequence) is sequence
        assert as_sequence("acgt", "named") == Sequence("named", "ACGT")
        with pytest.raises(TypeError):
            as_sequence(42)

    def test_is_ambiguous(self):
        assert is_ambiguous('N')
        assert is_ambiguous('r')
        assert not is_ambiguous('A')
        assert not is_ambiguous('U')
        assert not is_ambiguous(GAP)
        assert not is_ambiguous('X')


class TestIUPACCodes:
    """Test IUPAC code definitions."""

    def test_iupac_code_definitions(self):
        """Test that IUPAC codes are defined correctly."""
        assert 'A' in IUPAC_CODES['R']  # R contains A
        assert 'G' in IUPAC_CODES['R']  # R contains G
        assert 'C' in IUPAC_CODES['Y']  # Y contains C
        assert 'T' in IUPAC_CODES['Y']  # Y contains T
        assert len(IUPAC_CODES['N']) == 4  # N contains all nucleotides

    def test_standard_nucleotides(self):
        """Test standard nucleotide definitions."""
        assert IUPAC_CODES['A'] == {'A'}
        assert IUPAC_CODES['T'] == {'T'}
        assert IUPAC_CODES['C'] == {'C'}
        assert IUPAC_CODES['G'] == {'G'}

    def test_gap_not_in_alphabet(self):
        assert GAP not in IUPAC_CODES
        assert GAP not in IUPAC_ALPHABET


class TestScoreOperations:
    """Rescoring an edit trace from scratch."""

    def test_linear(self):
        ops = [EditOp.aligned('A', 'A'), EditOp.deletion('C'), EditOp.deletion('G'),
               EditOp.aligned('T', 'A')]
        assert ScoringModel().score_operations(ops) == 1 - 4 - 1

    def test_affine_runs(self):
        scoring = ScoringModel(gap_open=-5, gap_extend=-1)
        ops = [EditOp.deletion('C'), EditOp.deletion('G'), EditOp.aligned('A', 'A'),
               EditOp.insertion('T')]
        assert scoring.score_operations(ops) == (-5 - 2) + 1 + (-5 - 1)

    def test_adjacent_insertion_and_deletion_are_separate_gaps(self):
        scoring = ScoringModel(gap_open=-5, gap_extend=-1)
        ops = [EditOp.insertion('T'), EditOp.deletion('C')]
        assert scoring.score_operations(ops) == -12

    def test_empty(self):
        assert ScoringModel().score_operations([]) == 0


class TestFormatAlignment:
    """Test the wrapped alignment rendering."""

    def test_wrapped_blocks(self):
        result = align_pair("ACGT", "ACGA")
        expected = "\n".join([
            "reference 1 AC 2",
            "            ||",
            "query     1 AC 2",
            "",
            "reference 3 GT 4",
            "            |.",
            "query     3 GA 4",
        ])
        assert format_alignment(result, width=2) == expected

    def test_midline_codes(self):
        result = align_pair("ACGNTT", "ACGATTC")
        midline = format_alignment(result, width=120).split("\n")[1].strip()
        assert midline.startswith("|||:||")
        assert len(format_alignment(result).split("\n")) == 3

    def test_custom_format(self):
        result = align_pair("ACGT", "ACGA")
        fmt = ScoringFormat(match='*', substitution='x')
        assert "***x" in format_alignment(result, scoring_format=fmt)

    def test_labels(self):
        result = align_pair("ACGT", "ACGT")
        lines = format_alignment(result, reference_label="ref", query_label="read").split("\n")
        assert lines[0].startswith("ref ")
        assert lines[2].startswith("read ")

    def test_empty_alignment(self):
        result = align_pair("AAAA", "CCCC", mode="local")
        assert format_alignment(result) == ""

    def test_invalid_width(self):
        with pytest.raises(ValueError):
            format_alignment(align_pair("ACGT", "ACGT"), width=0)
