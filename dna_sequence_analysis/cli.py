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

Command line front end: align FASTA files and report mutation counts.

Exit codes:
    0  success
    1  a file could not be read or parsed
    2  invalid command line usage (argparse)
    3  the sequences or scoring parameters failed validation
    4  internal invariant violation
    130  interrupted
"""

import argparse
import signal
import sys
import threading
import time

from Bio import SeqIO

from .errors import (
    AlignmentCancelledError,
    AlignmentError,
    DimensionOverflowError,
    EmptySequenceError,
    GraphCycleError,
    InvalidSymbolError,
    ScoringConfigError,
)
from .log import get_logger, setup_logger
from .mutations import classify
from .pairwise import align_pair, levenshtein
from .poa import build_poa
from .results import format_alignment
from .scoring import AlignmentMode, ScoringModel
from .sequence import Sequence

EXIT_OK = 0
EXIT_FILE_ERROR = 1
EXIT_VALIDATION_ERROR = 3
EXIT_INTERNAL_ERROR = 4
EXIT_CANCELLED = 130

# Affine gap defaults used when no gap flag is given
DEFAULT_GAP_OPEN = -5
DEFAULT_GAP_EXTEND = -1


class FastaReadError(Exception):
    """A FASTA file is missing, unreadable, malformed or empty."""


def positive_int(value):
    """argparse type for counts that must be at least 1."""
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def exit_code_for(error):
    """Map an exception raised by the core onto a process exit code."""
    if isinstance(error, AlignmentCancelledError):
        return EXIT_CANCELLED
    if isinstance(error, GraphCycleError):
        return EXIT_INTERNAL_ERROR
    if isinstance(error, (InvalidSymbolError, EmptySequenceError, ScoringConfigError,
                          DimensionOverflowError)):
        return EXIT_VALIDATION_ERROR
    if isinstance(error, FastaReadError):
        return EXIT_FILE_ERROR
    return EXIT_INTERNAL_ERROR


def read_fasta(path):
    """Load every record of a FASTA file as a Sequence."""
    try:
        records = [Sequence(record.id, str(record.seq)) for record in SeqIO.parse(path, "fasta")]
    except (OSError, ValueError) as e:
        raise FastaReadError(f"Cannot read FASTA file {path}: {e}") from e
    if not records:
        raise FastaReadError(f"No FASTA records found in {path}")
    return records


def build_parser():
    parser = argparse.ArgumentParser(
        prog="dna-sequence-analysis",
        description="Align DNA sequences and count mutations relative to a reference.",
    )
    parser.add_argument("-r", "--reference", required=True, metavar="FILE",
                        help="Reference (master) FASTA file; its first record is used")
    parser.add_argument("-q", "--query", required=True, metavar="FILE",
                        help="Query FASTA file, the sequence(s) which will be aligned")
    parser.add_argument("-p", "--print", dest="print_alignment", action="store_true",
                        help="Print the alignment")
    parser.add_argument("--width", type=positive_int, default=120,
                        help="Alignment columns per printed line (default: 120)")
    parser.add_argument("--mode", choices=[mode.value for mode in AlignmentMode],
                        default=AlignmentMode.SEMIGLOBAL.value,
                        help="Alignment mode (default: semiglobal)")
    parser.add_argument("--poa", action="store_true",
                        help="Build a partial order graph of the reference and all query "
                             "records (implied when the query file has several records)")
    parser.add_argument("--match", type=int, default=1, help="Match score (default: 1)")
    parser.add_argument("--mismatch", type=int, default=-1, help="Mismatch score (default: -1)")
    parser.add_argument("--gap", type=int, default=None,
                        help="Linear gap score per gap symbol (disables the affine defaults)")
    parser.add_argument("--gap-open", type=int, default=None,
                        help=f"Affine gap opening score (default: {DEFAULT_GAP_OPEN})")
    parser.add_argument("--gap-extend", type=int, default=None,
                        help=f"Affine gap extension score (default: {DEFAULT_GAP_EXTEND})")
    parser.add_argument("--reverse-complement", action="store_true",
                        help="Align the reverse complement of the query")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", default=None, help="Also write the log to this file")
    return parser


def scoring_from_args(args):
    gap_open, gap_extend = args.gap_open, args.gap_extend
    if args.gap is not None and (gap_open is not None or gap_extend is not None):
        raise ScoringConfigError("--gap cannot be combined with --gap-open or --gap-extend")
    if args.gap is None and gap_open is None and gap_extend is None:
        gap_open, gap_extend = DEFAULT_GAP_OPEN, DEFAULT_GAP_EXTEND
    kwargs = dict(match_score=args.match, mismatch_penalty=args.mismatch,
                  gap_open=gap_open, gap_extend=gap_extend)
    if args.gap is not None:
        kwargs['gap_penalty'] = args.gap
    return ScoringModel(**kwargs)


def _print_report(name, result, reference, query):
    report = classify(result)
    print(f"{name}")
    print(f"  Score: {result.score}")
    print(f"  Matches: {report.match}")
    print(f"  Mismatches: {report.mismatch}")
    print(f"  Substitutions: {report.substitution}")
    print(f"  Insertions: {report.insertion}")
    print(f"  Deletions: {report.deletion}")
    print(f"  Total: {report.total}")
    print(f"  Identity: {report.identity:.4f}")
    if reference is not None:
        print(f"  Levenshtein distance: {levenshtein(reference, query)}")


def run(args, cancel, logger):
    scoring = scoring_from_args(args)
    mode = AlignmentMode(args.mode)

    reference = read_fasta(args.reference)[0]
    queries = read_fasta(args.query)
    if args.reverse_complement:
        queries = [query.reverse_complement() for query in queries]
    logger.info(f"Loaded reference {reference.name} ({len(reference)} bp) "
                f"and {len(queries)} query record(s)")

    start = time.perf_counter()
    if args.poa or len(queries) > 1:
        graph = build_poa([reference] + queries, scoring, mode, cancel=cancel)
        for name, result in zip(graph.sequence_names[1:], graph.alignments[1:]):
            _print_report(name, result, None, None)
            if args.print_alignment:
                print(format_alignment(result, args.width, reference_label='graph', query_label=name))
        consensus = graph.consensus()
        print(f"Graph nodes: {len(graph)}")
        print(f"Consensus ({len(consensus)} bp): {consensus.residues}")
    else:
        query = queries[0]
        result = align_pair(reference, query, scoring, mode, cancel=cancel)
        _print_report(query.name, result, reference, query)
        if args.print_alignment:
            print(format_alignment(result, args.width, reference_label=reference.name,
                                   query_label=query.name))
    print(f"time taken: {time.perf_counter() - start:.3f}s")


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logger(verbose=args.verbose, log_file=args.log_file)
    logger = get_logger("dna_sequence_analysis.cli")

    cancel = threading.Event()
    previous_handler = None
    if threading.current_thread() is threading.main_thread():
        previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: cancel.set())
    try:
        run(args, cancel, logger)
    except (AlignmentError, FastaReadError) as e:
        logger.error(str(e))
        return exit_code_for(e)
    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
