#!/usr/bin/env python3
"""
Test suite for mutation classification.

Tests the split between confirmed substitutions and ambiguity-code
mismatches, and the relationship between report totals and alignment spans.
"""

import dataclasses

import pytest
from dna_sequence_analysis import (
    AlignmentMode,
    EditOp,
    MutationReport,
    ScoringModel,
    align_pair,
    build_poa,
    classify,
    classify_operations,
)


class TestClassification:
    """Per-column categories."""

    @pytest.mark.parametrize("reference_symbol,query_symbol,category", [
        ('A', 'A', 'match'),
        ('N', 'N', 'match'),
        ('T', 'A', 'substitution'),
        ('C', 'U', 'substitution'),
        ('N', 'A', 'mismatch'),
        ('A', 'N', 'mismatch'),
        ('R', 'Y', 'mismatch'),
        ('R', 'A', 'mismatch'),
    ])
    def test_aligned_column(self, reference_symbol, query_symbol, category):
        report = classify_operations([EditOp.aligned(reference_symbol, query_symbol)])
        assert getattr(report, category) == 1
        assert report.total == 1

    def test_gap_columns(self):
        report = classify_operations([EditOp.insertion('A'), EditOp.deletion('C'),
                                      EditOp.deletion('G')])
        assert report.insertion == 1
        assert report.deletion == 2
        assert report.match == report.mismatch == report.substitution == 0

    def test_ambiguity_code_in_alignment(self):
        """N aligned to A is reported as a mismatch, not a substitution."""
        report = classify(align_pair("ACGNT", "ACGAT"))
        assert report.match == 4
        assert report.mismatch == 1
        assert report.substitution == 0

    def test_substitution_in_alignment(self):
        report = classify(align_pair("ACGT", "ACGA"))
        assert report == MutationReport(match=3, mismatch=0, substitution=1,
                                        insertion=0, deletion=0)

    def test_indels_in_alignment(self):
        """Shifting AGTA by one column costs one deletion and one insertion."""
        report = classify(align_pair("ACGTA", "AGTAC", ScoringModel(gap_penalty=-2)))
        assert report.deletion == 1
        assert report.insertion == 1
        assert report.match == 4

    def test_affine_deletion_run(self):
        scoring = ScoringModel(gap_open=-5, gap_extend=-1)
        report = classify(align_pair("AAATTTCCC", "AAACCC", scoring))
        assert report.deletion == 3
        assert report.insertion == 0
        assert report.match == 6


class TestReport:
    """MutationReport arithmetic."""

    def test_totals_and_identity(self):
        report = MutationReport(match=6, mismatch=1, substitution=1, insertion=1, deletion=1)
        assert report.total == 10
        assert report.identity == pytest.approx(0.6)

    def test_empty_identity(self):
        assert MutationReport().identity == 0.0
        assert MutationReport().total == 0

    def test_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            MutationReport().match = 1

    @pytest.mark.parametrize("mode", list(AlignmentMode), ids=lambda m: m.value)
    @pytest.mark.parametrize("reference,query", [
        ("ACGTACGTTA", "ACGTTCGTA"),
        ("GATTACA", "TTAC"),
        ("ACGNNACG", "ACGTTTACG"),
    ])
    def test_total_equals_aligned_columns(self, reference, query, mode):
        result = align_pair(reference, query, mode=mode)
        report = classify(result)
        assert report.total == result.aligned_length
        assert report.match + report.mismatch + report.substitution + report.deletion == \
            result.reference_end - result.reference_start
        assert report.match + report.mismatch + report.substitution + report.insertion == \
            result.query_end - result.query_start

    def test_poa_alignment(self):
        """Graph alignments are classified the same way as pairwise ones."""
        graph = build_poa(["ACGT", "ACGA", "ACGN"])
        reports = [classify(result) for result in graph.alignments]
        assert reports[0].match == 4
        assert reports[1].substitution == 1
        assert reports[2].match == 3
        assert reports[2].mismatch == 1
