"""Heuristic accessibility audit for crawled HTML pages."""

__version__ = "0.1.0"
