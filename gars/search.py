"""BM25 ranking over the local skill catalog."""

from __future__ import annotations

import math
import string
from collections import Counter
from dataclasses import dataclass
from pathlib import Path

from gars.skill import SkillIndex, scan_skills_dir

__all__ = ["SkillHit", "SearchOptions", "tokenize", "rank", "search_local"]

_K1 = 1.2
_B = 0.75
_KEY_BONUS = 5.0
_TAG_BONUS = 2.0
_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


@dataclass
class SkillHit:
    """A ranked skill."""

    skill: SkillIndex
    score: float


@dataclass
class SearchOptions:
    """Filters and limits for a search; ``top_k`` of 0 means no limit."""

    top_k: int = 0
    category: str | None = None
    autonomous_only: bool = False


def _ascii_eq(left: str, right: str) -> bool:
    return left.translate(_ASCII_LOWER) == right.translate(_ASCII_LOWER)


def tokenize(text: str) -> list[str]:
    """Split text into lowercase alphanumeric words; non-ASCII letters stand alone."""
    tokens: list[str] = []
    buf = ""
    for ch in text:
        alnum = ch.isalnum()
        if alnum:
            buf += ch.lower()
        elif buf:
            tokens.append(buf)
            buf = ""
        if alnum and not ch.isascii():
            if buf and buf != ch:
                tokens.append(buf)
            if not tokens or tokens[-1] != ch:
                tokens.append(ch)
            buf = ""
    if buf:
        tokens.append(buf)
    return tokens


def _build_doc(skill: SkillIndex) -> str:
    head = " ".join(
        [
            skill.key,
            skill.name,
            skill.one_line_summary,
            skill.description,
            skill.category,
        ]
    )
    tags = "".join(f"{tag} " for tag in skill.tags)
    return f"{head} {tags}{skill.body_preview}"


def _accepts(skill: SkillIndex, options: SearchOptions) -> bool:
    if options.category is not None and not _ascii_eq(skill.category, options.category):
        return False
    return not (options.autonomous_only and not skill.autonomous_safe)


def rank(
    skills: list[SkillIndex], query: str, options: SearchOptions | None = None
) -> list[SkillHit]:
    """Rank skills against a query with BM25 plus key and tag bonuses."""
    options = options or SearchOptions()
    terms = tokenize(query)
    if not terms:
        return []
    filtered = [skill for skill in skills if _accepts(skill, options)]
    n = float(max(len(filtered), 1))
    doc_tokens = [tokenize(_build_doc(skill)) for skill in filtered]
    df: Counter[str] = Counter()
    for tokens in doc_tokens:
        df.update(set(tokens))
    avgdl = sum(len(tokens) for tokens in doc_tokens) / n

    hits = []
    for skill, tokens in zip(filtered, doc_tokens):
        tf = Counter(tokens)
        dl = float(len(tokens))
        score = 0.0
        for term in terms:
            f = tf[term]
            if not f:
                continue
            dft = df[term]
            idf = math.log((n - dft + 0.5) / (dft + 0.5) + 1.0)
            denom = f + _K1 * (1.0 - _B + _B * dl / max(avgdl, 1.0))
            score += idf * f * (_K1 + 1.0) / denom
            if _ascii_eq(skill.key, term):
                score += _KEY_BONUS
            if any(_ascii_eq(tag, term) for tag in skill.tags):
                score += _TAG_BONUS
        if score > 0.0:
            hits.append(SkillHit(skill=skill, score=score))

    hits.sort(key=lambda hit: hit.score, reverse=True)
    if options.top_k > 0:
        hits = hits[: options.top_k]
    return hits


def search_local(
    query: str, root: str | Path, options: SearchOptions | None = None
) -> list[SkillHit]:
    """Scan the skills root and rank its entries against ``query``."""
    return rank(scan_skills_dir(root), query, options)