"""
Reference preprocessing collaborator.

Turns raw text into the annotated records the ranking core consumes. There
is no tagger here: tokens get a coarse category (WORD, NUM or STOP) from a
stop-word list and a digit check, and the lemma is a light suffix stem.
"""
from __future__ import annotations
import math
import re
from collections import Counter
from dataclasses import dataclass
from typing import List, Optional

from .datatypes import Document, SentenceRecord, SentenceTerm, TokenRecord

RE_HEX = re.compile(r'^[0-9a-fA-F]{16,}$')   # long hex (hashes)
RE_UUID = re.compile(r'^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[1-5][0-9a-fA-F]{3}-[89abAB][0-9a-fA-F]{3}-[0-9a-fA-F]{12}$')

WORD, NUM, STOP = "WORD", "NUM", "STOP"


def shannon_entropy(s: str) -> float:
    if not s:
        return 0.0
    counts = Counter(s)
    n = len(s)
    return -sum((c/n) * math.log2(c/n) for c in counts.values())


def is_noise_token(tok: str) -> bool:
    if not tok:
        return True
    if RE_UUID.match(tok):
        return True
    if RE_HEX.match(tok) and len(tok) >= 24:
        return True
    # long alphanumeric strings with high entropy look random
    letters_digits = sum(ch.isalnum() for ch in tok)
    if len(tok) >= 16 and letters_digits / len(tok) > 0.95 and shannon_entropy(tok) > 4.0:
        return True
    return False


_WORD_RE = re.compile(r"""[A-Za-z0-9_]+(?:'[A-Za-z0-9_]+)?""")  # simple token rule

STOPWORDS = {
    # minimal English stopword set (extend as needed)
    'the','a','an','and','or','but','if','then','else','for','to','of','in','on','at','by','with','as',
    'is','are','was','were','be','been','being','this','that','these','those','it','its','from','into',
    'we','you','they','he','she','i','me','my','your','our','their','his','her','them','us','do','does',
    'did','not','no','so','than','too','very','can','could','should','would','will','shall'
}


@dataclass
class PreprocessConfig:
    lowercase: bool = True
    stemming: bool = True
    drop_noise: bool = True


def _simple_stem(token: str) -> str:
    # Very light stemmer for English
    t = token.lower()
    if len(t) > 4 and t.endswith("ies"):
        return t[:-3] + "y"     # stories -> story
    if len(t) > 5 and t.endswith("ing"):
        return t[:-3]           # playing -> play
    if len(t) > 4 and t.endswith("ed"):
        return t[:-2]           # worked -> work
    if len(t) > 3 and t.endswith("s") and not t.endswith("ss"):
        return t[:-1]           # books -> book
    return t


def split_sentences(text: str) -> List[str]:
    # Split on . ! ? while keeping order; naive but serviceable
    parts = re.split(r"(?<=[.!?])\s+", text.strip())
    return [p.strip() for p in parts if p.strip()]


def categorize(tok: str) -> str:
    low = tok.lower()
    if low in STOPWORDS:
        return STOP
    if any(ch.isdigit() for ch in tok):
        return NUM
    return WORD


def tokenize(text: str, cfg: PreprocessConfig) -> List[str]:
    toks = [m.group(0) for m in _WORD_RE.finditer(text)]
    if cfg.drop_noise:
        toks = [t for t in toks if not is_noise_token(t)]
    return toks


def preprocess_text(text: str, title: Optional[str] = None, cfg: Optional[PreprocessConfig] = None) -> Document:
    cfg = cfg or PreprocessConfig()
    tokens: List[TokenRecord] = []
    sentences: List[SentenceRecord] = []
    terms: List[SentenceTerm] = []
    position = 0
    for i, s in enumerate(split_sentences(text)):
        sentences.append(SentenceRecord(sentence_id=i, sentence_text=s, original_order=i))
        for tok in tokenize(s, cfg):
            unit = tok.lower() if cfg.lowercase else tok
            lemma = _simple_stem(unit) if cfg.stemming else unit
            tag = categorize(tok)
            tokens.append(TokenRecord(text_unit=unit, lemma=lemma, category_tag=tag,
                                      sentence_id=i, document_position=position))
            terms.append(SentenceTerm(sentence_id=i, lemma=lemma, category_tag=tag))
            position += 1
    return Document(title=title, raw_text=text, tokens=tokens, sentences=sentences, terms=terms)
