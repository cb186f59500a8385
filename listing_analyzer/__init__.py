"""Heuristic extraction and summary of marketplace listing pages."""
