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

Partial order alignment (POA) graph for multiple sequences.

Sequences are folded one at a time into a directed acyclic graph of residue
nodes. Each new sequence is aligned against the whole graph with the shared
DP engine, where a node's predecessor rows are its graph predecessors, and is
then threaded through the graph: matched residues reuse existing nodes, all
other residues get new nodes.
"""

import dataclasses
import heapq
import logging
from dataclasses import dataclass, field
from typing import Dict, List

from .dp import DEFAULT_MAX_CELLS, align_rows, check_dimensions
from .errors import GraphCycleError
from .results import AlignmentResult, EditKind, EditOp
from .scoring import DEFAULT_SCORING, AlignmentMode
from .sequence import Sequence, as_sequence

logger = logging.getLogger(__name__)


@dataclass
class POANode:
    """A residue node of the graph.

    Attributes:
        node_id: Index of the node in the graph's arena
        symbol: Residue carried by every sequence threaded through the node
        predecessors: Ids of nodes with an edge into this node
        successors: Successor node id -> edge weight (number of sequences using the edge)
        weight: Number of sequences threaded through the node
    """
    node_id: int
    symbol: str
    predecessors: List[int] = field(default_factory=list)
    successors: Dict[int, int] = field(default_factory=dict)
    weight: int = 0


class POAGraph:
    """
    Arena of POANode objects addressed by integer id.

    Node ids grow in creation order. A topological order (Kahn's algorithm,
    lowest id first) is recomputed after every insertion and doubles as the
    acyclicity check.
    """

    def __init__(self):
        self._nodes = []
        self._order = []
        self.sequence_names = []
        self.alignments = []

    def __len__(self):
        return len(self._nodes)

    @property
    def nodes(self):
        return tuple(self._nodes)

    def node(self, node_id):
        return self._nodes[node_id]

    @property
    def start_nodes(self):
        return [node.node_id for node in self._nodes if not node.predecessors]

    @property
    def end_nodes(self):
        return [node.node_id for node in self._nodes if not node.successors]

    def edge_weight(self, source, target):
        """Weight of the edge source -> target, 0 when there is no such edge."""
        return self._nodes[source].successors.get(target, 0)

    def topological_order(self):
        return list(self._order)

    def _add_node(self, symbol):
        node = POANode(len(self._nodes), symbol)
        self._nodes.append(node)
        return node.node_id

    def _add_edge(self, source, target, ranks):
        source_node = self._nodes[source]
        if target in source_node.successors:
            source_node.successors[target] += 1
            return
        # Edges between nodes that existed before this insertion must point forward
        if source in ranks and target in ranks and ranks[source] >= ranks[target]:
            raise GraphCycleError(
                f"Edge {source} -> {target} would point backwards in topological order "
                f"({ranks[source]} >= {ranks[target]})"
            )
        source_node.successors[target] = 1
        self._nodes[target].predecessors.append(source)

    def _thread(self, path, ranks):
        for node_id in path:
            self._nodes[node_id].weight += 1
        for source, target in zip(path, path[1:]):
            self._add_edge(source, target, ranks)

    def _sort(self):
        in_degree = [len(node.predecessors) for node in self._nodes]
        ready = [node.node_id for node in self._nodes if in_degree[node.node_id] == 0]
        heapq.heapify(ready)
        order = []
        while ready:
            node_id = heapq.heappop(ready)
            order.append(node_id)
            for successor in self._nodes[node_id].successors:
                in_degree[successor] -= 1
                if in_degree[successor] == 0:
                    heapq.heappush(ready, successor)
        if len(order) != len(self._nodes):
            raise GraphCycleError(
                f"Graph contains a cycle: only {len(order)} of {len(self._nodes)} nodes can be ordered"
            )
        self._order = order

    def insert(self, sequence, scoring=None, mode=AlignmentMode.GLOBAL, *,
               max_cells=DEFAULT_MAX_CELLS, cancel=None):
        """
        Align a sequence against the graph and fold it in.

        The first sequence becomes a linear chain. Later sequences are aligned
        against the graph (GLOBAL: along a full start-to-end path) and threaded
        through it: MATCH reuses the matched node, SUBSTITUTION and INSERTION
        create new nodes, DELETION skips a node, and query residues left outside
        a SEMIGLOBAL or LOCAL alignment become new nodes at either end.

        Returns:
            AlignmentResult: The sequence's alignment against the graph. Reference
            offsets are topological ranks and reference_nodes lists the graph node
            consumed by each operation. For the first sequence this is its all-MATCH
            alignment against its own chain.
        """
        if scoring is None:
            scoring = DEFAULT_SCORING
        mode = AlignmentMode(mode)
        sequence = as_sequence(sequence, f"sequence_{len(self.sequence_names) + 1}")
        scoring.check_sequence(sequence)

        if not self._nodes:
            path = [self._add_node(symbol) for symbol in sequence.residues]
            self._thread(path, {})
            self._sort()
            ops = [EditOp.aligned(symbol, symbol) for symbol in sequence.residues]
            result = AlignmentResult.from_operations(
                ops, scoring.score_operations(ops), reference_start=0, query_start=0,
                mode=mode, reference_nodes=path)
        else:
            result = self._insert_aligned(sequence, scoring, mode, max_cells, cancel)

        self.sequence_names.append(sequence.name)
        self.alignments.append(result)
        logger.debug(
            f"Inserted {sequence.name} ({len(sequence)} bp); graph now has "
            f"{len(self._nodes)} nodes, score {result.score}"
        )
        return result

    def _insert_aligned(self, sequence, scoring, mode, max_cells, cancel):
        order = self._order
        check_dimensions(len(order) + 1, len(sequence) + 1, max_cells)

        # DP row r holds the node at topological rank r-1
        ranks = {node_id: rank for rank, node_id in enumerate(order)}
        row_symbols = [None] + [self._nodes[node_id].symbol for node_id in order]
        row_predecessors = [()]
        for node_id in order:
            preds = sorted(ranks[p] + 1 for p in self._nodes[node_id].predecessors)
            row_predecessors.append(tuple(preds) if preds else (0,))
        end_rows = sorted(ranks[node_id] + 1 for node_id in self.end_nodes)

        score, ops, op_rows, end_row, end_column, _, _ = align_rows(
            row_symbols, row_predecessors, end_rows, sequence.residues, scoring, mode, cancel)
        reference_nodes = [order[row - 1] if row is not None else None for row in op_rows]

        residues = sequence.residues
        query_end = end_column + sum(1 for op in ops if op.kind is not EditKind.DELETION)
        path = [self._add_node(symbol) for symbol in residues[:end_column]]
        for op, node_id in zip(ops, reference_nodes):
            if op.kind is EditKind.MATCH:
                path.append(node_id)
            elif op.kind in (EditKind.SUBSTITUTION, EditKind.INSERTION):
                path.append(self._add_node(op.query_symbol))
        path.extend(self._add_node(symbol) for symbol in residues[query_end:])

        self._thread(path, ranks)
        self._sort()

        consumed = [row - 1 for row in op_rows if row is not None]
        result = AlignmentResult.from_operations(
            ops, score, reference_start=consumed[0] if consumed else end_row,
            query_start=end_column, mode=mode, reference_nodes=reference_nodes)
        return dataclasses.replace(
            result, reference_end=consumed[-1] + 1 if consumed else end_row)

    def consensus(self, name='consensus'):
        """
        Heaviest path through the graph.

        The path from a start node to an end node maximising the summed edge
        weights. Ties prefer the predecessor, and then the end node, with the
        lowest id, i.e. the path that was created earliest.

        Returns:
            Sequence: The consensus residues

        Raises:
            ValueError: The graph is empty
        """
        if not self._nodes:
            raise ValueError("Cannot extract a consensus from an empty graph")

        path_score = {}
        back = {}
        for node_id in self._order:
            best, choice = 0, None
            for pred in sorted(self._nodes[node_id].predecessors):
                value = path_score[pred] + self._nodes[pred].successors[node_id]
                if choice is None or value > best:
                    best, choice = value, pred
            path_score[node_id] = best
            back[node_id] = choice

        end = None
        for node_id in sorted(self.end_nodes):
            if end is None or path_score[node_id] > path_score[end]:
                end = node_id

        residues = []
        while end is not None:
            residues.append(self._nodes[end].symbol)
            end = back[end]
        return Sequence(name, ''.join(reversed(residues)))


def build_poa(sequences, scoring=None, mode=AlignmentMode.GLOBAL, *,
              max_cells=DEFAULT_MAX_CELLS, cancel=None):
    """
    Build a POA graph from sequences inserted in the given order.

    Raises:
        ValueError: No sequences were given
    """
    sequences = list(sequences)
    if not sequences:
        raise ValueError("At least one sequence is required to build a POA graph")
    graph = POAGraph()
    for index, sequence in enumerate(sequences, start=1):
        graph.insert(as_sequence(sequence, f"sequence_{index}"), scoring, mode,
                     max_cells=max_cells, cancel=cancel)
    return graph
