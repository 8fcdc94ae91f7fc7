"""Edit distance and fuzzy keyword overlap scoring."""

import math
import string

from .config import (
    PHRASE_WORD_TOLERANCE, PHRASE_MATCH_RATIO, WORD_TOLERANCE, MIN_TOKEN_LENGTH,
)

_EDGE_PUNCT = string.punctuation + "“”‘’"


def levenshtein(a: str, b: str) -> int:
    """Unit-cost insert/delete/substitute distance, two rows at a time."""
    if a == b:
        return 0
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        current = [i]
        for j, cb in enumerate(b, 1):
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (ca != cb),
            ))
        previous = current
    return previous[-1]


def tokenize(text: str) -> list[str]:
    tokens = []
    for raw in text.lower().split():
        tok = raw.strip(_EDGE_PUNCT)
        if tok:
            tokens.append(tok)
    return tokens


def _tolerance(word: str, ratio: float) -> int:
    return max(1, math.floor(len(word) * ratio))


def _closest(word: str, tokens: list[str], tolerance: int) -> int | None:
    best = None
    for tok in tokens:
        if abs(len(tok) - len(word)) > tolerance:
            continue
        dist = levenshtein(word, tok)
        if dist <= tolerance and (best is None or dist < best):
            best = dist
            if dist == 0:
                break
    return best


def _phrase_score(phrase: str, text_low: str, tokens: list[str]) -> float:
    words = phrase.split()
    found = 0
    for word in words:
        if word in text_low:
            found += 1
        elif _closest(word, tokens, _tolerance(word, PHRASE_WORD_TOLERANCE)) is not None:
            found += 1
    ratio = found / len(words)
    return ratio if ratio >= PHRASE_MATCH_RATIO else 0.0


def _word_score(word: str, long_tokens: list[str]) -> float:
    dist = _closest(word, long_tokens, _tolerance(word, WORD_TOLERANCE))
    if dist is None:
        return 0.0
    return 1.0 - dist / len(word)


def keyword_overlap(text: str, keywords) -> tuple[list[str], float]:
    """
    Score how well `text` satisfies `keywords`.

    Exact (case-insensitive) substring hits count 1.0. Phrases count the
    fraction of their words found, once at least 70% are found. Single
    words fall back to the closest text token within edit tolerance.
    Returns (matched keywords in input order, mean per-keyword score).
    """
    keywords = [k for k in keywords if k and k.strip()]
    if not keywords:
        return [], 0.0

    text_low = text.lower()
    tokens = tokenize(text)
    long_tokens = [t for t in tokens if len(t) >= MIN_TOKEN_LENGTH]

    matched: list[str] = []
    total = 0.0
    for keyword in keywords:
        kw = keyword.strip().lower()
        if kw in text_low:
            score = 1.0
        elif " " in kw:
            score = _phrase_score(kw, text_low, tokens)
        else:
            score = _word_score(kw, long_tokens)
        if score > 0 and keyword not in matched:
            matched.append(keyword)
        total += score

    return matched, total / len(keywords)
