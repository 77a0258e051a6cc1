"""
Registry age filter.

Keeps freshly published releases out of the ``latest`` dist-tag served by an
npm-compatible registry.
"""

__version__ = "0.1.0"
