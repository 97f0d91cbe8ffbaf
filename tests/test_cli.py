#!/usr/bin/env python3
"""
Tests for the command line front end.

Runs main() in-process against FASTA files written to a temporary directory
and checks the printed report and exit codes.
"""

import logging

import pytest
from dna_sequence_analysis import (
    AlignmentCancelledError,
    DimensionOverflowError,
    EmptySequenceError,
    GraphCycleError,
    InvalidSymbolError,
    ScoringConfigError,
)
from dna_sequence_analysis import log
from dna_sequence_analysis.cli import (
    EXIT_CANCELLED,
    EXIT_FILE_ERROR,
    EXIT_INTERNAL_ERROR,
    EXIT_OK,
    EXIT_VALIDATION_ERROR,
    FastaReadError,
    build_parser,
    exit_code_for,
    main,
    read_fasta,
    scoring_from_args,
)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop the handlers main() installs so they do not outlive the test."""
    yield
    logging.getLogger().handlers.clear()
    log._is_configured = False


def write_fasta(path, records):
    path.write_text(''.join(f">{name}\n{residues}\n" for name, residues in records))
    return str(path)


@pytest.fixture
def reference_file(tmp_path):
    return write_fasta(tmp_path / "reference.fasta", [("ref", "ACGTACGTTAGC")])


class TestPairwiseRun:
    """Single query record."""

    def test_report(self, tmp_path, reference_file, capsys):
        query_file = write_fasta(tmp_path / "query.fasta", [("read1", "TTACGTACGTAAGCGG")])
        assert main(["-r", reference_file, "-q", query_file]) == EXIT_OK
        out = capsys.readouterr().out
        assert "read1" in out
        assert "Score:" in out
        assert "Substitutions: 1" in out
        assert "Levenshtein distance:" in out
        assert "time taken:" in out

    def test_print_alignment(self, tmp_path, reference_file, capsys):
        query_file = write_fasta(tmp_path / "query.fasta", [("read1", "ACGTACGTTAGC")])
        assert main(["-r", reference_file, "-q", query_file, "--print", "--mode", "global"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "1 ACGTACGTTAGC 12" in out
        assert "||||||||||||" in out

    def test_reverse_complement(self, tmp_path, reference_file, capsys):
        query_file = write_fasta(tmp_path / "query.fasta", [("read1", "GCTAACGTACGT")])
        assert main(["-r", reference_file, "-q", query_file, "--reverse-complement",
                     "--mode", "global"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "Matches: 12" in out

    def test_log_file(self, tmp_path, reference_file):
        query_file = write_fasta(tmp_path / "query.fasta", [("read1", "ACGTACGTTAGC")])
        log_file = tmp_path / "logs" / "run.log"
        assert main(["-r", reference_file, "-q", query_file, "-v",
                     "--log-file", str(log_file)]) == EXIT_OK
        assert "Loaded reference ref" in log_file.read_text()


class TestPOARun:
    """Several query records build a graph."""

    def test_multiple_queries(self, tmp_path, reference_file, capsys):
        query_file = write_fasta(tmp_path / "query.fasta", [
            ("read1", "ACGTACGTTAGC"),
            ("read2", "ACGTACGATAGC"),
        ])
        assert main(["-r", reference_file, "-q", query_file, "--mode", "global"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "read1" in out
        assert "read2" in out
        assert "Consensus (12 bp): ACGTACGTTAGC" in out

    def test_forced_poa(self, tmp_path, reference_file, capsys):
        query_file = write_fasta(tmp_path / "query.fasta", [("read1", "ACGTACGTTAGC")])
        assert main(["-r", reference_file, "-q", query_file, "--poa"]) == EXIT_OK
        assert "Graph nodes: 12" in capsys.readouterr().out


class TestExitCodes:
    """Failures map onto distinct exit codes."""

    def test_missing_file(self, tmp_path, reference_file):
        missing = str(tmp_path / "missing.fasta")
        assert main(["-r", reference_file, "-q", missing]) == EXIT_FILE_ERROR

    def test_empty_file(self, tmp_path, reference_file):
        empty = tmp_path / "empty.fasta"
        empty.write_text("")
        assert main(["-r", reference_file, "-q", str(empty)]) == EXIT_FILE_ERROR

    def test_invalid_symbol(self, tmp_path, reference_file):
        query_file = write_fasta(tmp_path / "query.fasta", [("read1", "ACGXACGT")])
        assert main(["-r", reference_file, "-q", query_file]) == EXIT_VALIDATION_ERROR

    def test_bad_scoring(self, tmp_path, reference_file):
        query_file = write_fasta(tmp_path / "query.fasta", [("read1", "ACGT")])
        assert main(["-r", reference_file, "-q", query_file,
                     "--match", "-1", "--mismatch", "-1"]) == EXIT_VALIDATION_ERROR

    def test_gap_conflicts_with_affine_flags(self, tmp_path, reference_file):
        query_file = write_fasta(tmp_path / "query.fasta", [("read1", "ACGT")])
        assert main(["-r", reference_file, "-q", query_file, "--gap", "-2",
                     "--gap-open", "-5", "--gap-extend", "-1"]) == EXIT_VALIDATION_ERROR

    def test_missing_arguments(self):
        with pytest.raises(SystemExit) as excinfo:
            main([])
        assert excinfo.value.code == 2

    @pytest.mark.parametrize("width", ["0", "-5"])
    def test_non_positive_width(self, tmp_path, reference_file, width):
        query_file = write_fasta(tmp_path / "query.fasta", [("read1", "ACGT")])
        with pytest.raises(SystemExit) as excinfo:
            main(["-r", reference_file, "-q", query_file, "--print", "--width", width])
        assert excinfo.value.code == 2

    @pytest.mark.parametrize("error,code", [
        (InvalidSymbolError("q", "X", 0), EXIT_VALIDATION_ERROR),
        (EmptySequenceError("q"), EXIT_VALIDATION_ERROR),
        (ScoringConfigError("bad"), EXIT_VALIDATION_ERROR),
        (DimensionOverflowError(10, 10, 50), EXIT_VALIDATION_ERROR),
        (GraphCycleError("cycle"), EXIT_INTERNAL_ERROR),
        (AlignmentCancelledError("stop"), EXIT_CANCELLED),
        (FastaReadError("nope"), EXIT_FILE_ERROR),
    ])
    def test_exit_code_mapping(self, error, code):
        assert exit_code_for(error) == code


class TestArguments:
    """Scoring flags."""

    def test_default_affine(self):
        args = build_parser().parse_args(["-r", "a.fa", "-q", "b.fa"])
        scoring = scoring_from_args(args)
        assert scoring.gap_costs == (-5, -1)
        assert args.mode == "semiglobal"
        assert args.width == 120

    def test_linear_gap(self):
        args = build_parser().parse_args(["-r", "a.fa", "-q", "b.fa", "--gap", "-3"])
        scoring = scoring_from_args(args)
        assert scoring.is_affine is False
        assert scoring.gap_costs == (0, -3)

    def test_read_fasta(self, tmp_path):
        path = write_fasta(tmp_path / "two.fasta", [("a", "acgt"), ("b", "GGCC")])
        records = read_fasta(path)
        assert [r.name for r in records] == ["a", "b"]
        assert records[0].residues == "ACGT"
