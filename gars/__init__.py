"""Skill catalog with BM25 search, plan summaries, subagent definitions, a SQLite task store and file/script helpers."""

__version__ = "0.0.3"