"""Split document text into scored candidate clause segments."""

import logging
import re

from .config import SegmentationPolicy
from .fuzzy import keyword_overlap
from .models import Segment

logger = logging.getLogger(__name__)

# Section-level boundaries: blank-line runs, numbered / lettered headers,
# "Section 4" / "Article IV" headers, ALL-CAPS heading lines, and a sentence
# end followed by a capitalised word.
_DELIMITER_RE = re.compile(
    r"\n[ \t]*\n\s*"
    r"|\n(?=[ \t]*(?:\d{1,3}(?:\.\d{1,3})*\.?|\([a-zA-Z0-9]{1,4}\)|[a-z]\))\s)"
    r"|\n(?=[ \t]*[A-Z][A-Z0-9 ,&/'\-]{2,}[ \t]*(?:\n|$))"
    r"|(?<=[a-z)\"”'][.!?;])\s+(?=[\"“(]?[A-Z])",
)
_HEADING_RE = re.compile(r"\n(?=[ \t]*(?:section|article|clause)\s+[\dIVXLC]+)", re.IGNORECASE)
_SENTENCE_END_RE = re.compile(r"(?<=[^\s\d.][.!?])\s+|\n[ \t]*\n\s*")


def _split_spans(document: str, boundary: re.Pattern) -> list[tuple[int, int]]:
    spans = []
    start = 0
    for m in boundary.finditer(document):
        if document[start:m.start()].strip():
            spans.append((start, m.start()))
        start = m.end()
    if document[start:].strip():
        spans.append((start, len(document)))
    return spans


def delimiter_pieces(document: str) -> list[str]:
    """Pieces between legal-clause delimiters, in document order."""
    cuts = {m.start() for m in _DELIMITER_RE.finditer(document)}
    cuts |= {m.start() for m in _HEADING_RE.finditer(document)}
    pieces = []
    start = 0
    for cut in sorted(cuts):
        if cut > start:
            pieces.append(document[start:cut])
        start = cut
    pieces.append(document[start:])
    return [p.strip() for p in pieces if p.strip()]


def sentence_windows(document: str, max_window: int, max_sentences: int) -> list[str]:
    """Runs of 1..max_window consecutive sentences."""
    spans = _split_spans(document, _SENTENCE_END_RE)
    if len(spans) > max_sentences:
        logger.debug("Sentence budget hit: considering %d of %d sentences", max_sentences, len(spans))
        spans = spans[:max_sentences]
    windows = []
    for i in range(len(spans)):
        for width in range(1, max_window + 1):
            if i + width > len(spans):
                break
            windows.append(document[spans[i][0]:spans[i + width - 1][1]].strip())
    return windows


def _overlaps(a: Segment, b: Segment, ratio: float) -> bool:
    shared = min(a.end, b.end) - max(a.start, b.start)
    if shared <= 0:
        return False
    return shared > ratio * (a.end - a.start) or shared > ratio * (b.end - b.start)


def segment_text(
    document: str,
    keywords,
    max_length: int | None = None,
    policy: SegmentationPolicy | None = None,
) -> list[Segment]:
    """
    Candidate clause segments scored against `keywords`, best first.

    Candidates come from legal delimiters and from sliding sentence
    windows. Overlapping candidates are collapsed to the higher scorer.
    """
    policy = policy or SegmentationPolicy()
    max_length = max_length or policy.max_length
    if not document or not document.strip():
        return []

    candidates = delimiter_pieces(document)
    candidates += sentence_windows(document, policy.max_window, policy.max_sentences)
    candidates = list(dict.fromkeys(candidates))
    if len(candidates) > policy.max_candidates:
        logger.debug("Candidate budget hit: scoring %d of %d candidates",
                     policy.max_candidates, len(candidates))
        candidates = candidates[:policy.max_candidates]

    kept: list[Segment] = []
    for text in candidates:
        if not (policy.min_length <= len(text) <= max_length):
            continue
        _, score = keyword_overlap(text, keywords)
        if score <= policy.min_score:
            continue
        start = max(document.find(text), 0)
        seg = Segment(text=text, start=start, end=start + len(text), score=score)

        for idx, other in enumerate(kept):
            if _overlaps(seg, other, policy.overlap_ratio):
                if seg.score > other.score:
                    kept[idx] = seg
                break
        else:
            kept.append(seg)

    kept.sort(key=lambda s: -s.score)
    return kept[:policy.top_n]
