from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterator, List, Optional, Tuple

import networkx as nx
import pandas as pd

NodeId = Hashable
ScoreVector = Dict[NodeId, float]  # node -> stationary score


@dataclass(frozen=True)
class TokenRecord:
    text_unit: str
    lemma: str
    category_tag: str
    sentence_id: Hashable
    document_position: int
    doc_id: Hashable = None


@dataclass(frozen=True)
class SentenceRecord:
    sentence_id: Hashable
    sentence_text: str
    original_order: int


@dataclass(frozen=True)
class SentenceTerm:
    sentence_id: Hashable
    lemma: str
    category_tag: Optional[str] = None


@dataclass
class Node:
    id: NodeId
    position: Optional[int] = None
    score: float = 1.0


@dataclass(frozen=True)
class Edge:
    source: NodeId
    target: NodeId
    weight: float


@dataclass
class Graph:
    """Weighted graph keyed by node id.

    ``adjacency[a][b]`` is the weight of the edge a -> b. Undirected graphs
    store every edge in both directions. Nodes keep insertion order, which is
    the order the solver iterates them in.
    """
    directed: bool = False
    nodes: Dict[NodeId, Node] = field(default_factory=dict)
    adjacency: Dict[NodeId, Dict[NodeId, float]] = field(default_factory=dict)

    def add_node(self, node_id: NodeId, position: Optional[int] = None) -> Node:
        node = self.nodes.get(node_id)
        if node is None:
            node = Node(id=node_id, position=position)
            self.nodes[node_id] = node
            self.adjacency[node_id] = {}
        elif node.position is None or (position is not None and position < node.position):
            node.position = position
        return node

    def add_edge(self, a: NodeId, b: NodeId, weight: float = 1.0) -> None:
        if a == b:
            return  # no self-loops
        if weight < 0:
            raise ValueError(f"Edge weight must be non-negative, got {weight}")
        self.add_node(a)
        self.add_node(b)
        self.adjacency[a][b] = self.adjacency[a].get(b, 0.0) + weight
        if not self.directed:
            self.adjacency[b][a] = self.adjacency[b].get(a, 0.0) + weight

    def neighbors(self, node_id: NodeId) -> Dict[NodeId, float]:
        return self.adjacency[node_id]

    def weight(self, a: NodeId, b: NodeId) -> float:
        return self.adjacency.get(a, {}).get(b, 0.0)

    def out_weight(self, node_id: NodeId) -> float:
        return sum(self.adjacency[node_id].values())

    def edges(self) -> Iterator[Edge]:
        """Yield each edge once (undirected edges in first-seen orientation)."""
        index = {n: i for i, n in enumerate(self.nodes)}
        for a, nbrs in self.adjacency.items():
            for b, w in nbrs.items():
                if self.directed or index[a] < index[b]:
                    yield Edge(source=a, target=b, weight=w)

    @property
    def n_edges(self) -> int:
        return sum(1 for _ in self.edges())

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id) -> bool:
        return node_id in self.nodes

    def to_networkx(self):
        """Export as a networkx graph for inspection or drawing."""
        G = nx.DiGraph() if self.directed else nx.Graph()
        for node in self.nodes.values():
            G.add_node(node.id, position=node.position, score=node.score)
        for e in self.edges():
            G.add_edge(e.source, e.target, weight=e.weight)
        return G

    def edge_frame(self):
        rows = [{"source": e.source, "target": e.target, "weight": e.weight} for e in self.edges()]
        return pd.DataFrame(rows, columns=["source", "target", "weight"])


@dataclass
class PageRankResult:
    scores: ScoreVector
    iterations: int
    converged: bool
    max_delta: float
    timed_out: bool = False
    deltas: List[float] = field(default_factory=list)  # max delta per iteration


@dataclass
class Keyword:
    keyword: str
    terms: Tuple[str, ...]
    score: float
    freq: int
    position: int

    @property
    def ngram(self) -> int:
        return len(self.terms)

    @property
    def identifier(self) -> str:
        return self.keyword


@dataclass
class RankedSentence:
    sentence_id: Hashable
    sentence: str
    score: float
    position: int

    @property
    def identifier(self):
        return self.sentence_id


@dataclass
class KeywordResult:
    keywords: List[Keyword]       # phrase table (ngram 1..N), ordered per selection
    terms: List[Keyword]          # every unigram node, by rank
    pagerank: PageRankResult
    graph: Graph


@dataclass
class SentenceResult:
    sentences: List[RankedSentence]   # selected sentences, ordered per selection
    ranked: List[RankedSentence]      # every sentence, by rank
    pagerank: PageRankResult
    graph: Graph


@dataclass
class Document:
    title: Optional[str]
    raw_text: str
    tokens: List[TokenRecord]
    sentences: List[SentenceRecord]
    terms: List[SentenceTerm]
