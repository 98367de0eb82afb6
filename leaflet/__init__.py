"""Leaflet documentation generator.

Inventories a project's files, samples its source code, asks an LLM
for a semantic analysis, and renders documentation and scaffold
templates from the result.
"""

__version__ = "1.0.0"
