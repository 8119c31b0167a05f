"""Zine collage to paginated novel engine.

This package focuses on:
- a reading-order transcript of a zine (text verbatim, images described
  from captions or nearby text)
- handing the transcript to an external prose generator
- splitting the generated prose into pages and two-page spreads

The editor UI and the hosted generation service are out of scope.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
