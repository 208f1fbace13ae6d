from .datatypes import (Node, Edge, Graph, TokenRecord, SentenceRecord, SentenceTerm, Document,
                        PageRankResult, Keyword, RankedSentence, KeywordResult, SentenceResult)
from .errors import TextRankError, EmptyInputError, InvalidConfigurationError, InvalidInputError, DidNotConverge
from .config import TextRankConfig, Selection
from .preprocessing import PreprocessConfig, preprocess_text
from .graphing import build_keyword_graph, build_sentence_graph, overlap_similarity, jaccard_similarity
from .candidates import all_pairs, minhash_candidates
from .scoring import pagerank
from .phrases import aggregate_phrases, filter_ngram
from .selection import select, rank_order, position_order
from .summarize import textrank_keywords, textrank_sentences, summary, generate_summary, summarize, extract_keywords
