"""Command-line interface module for XML/JSON conversion.

This module provides the ``xml-json`` tool for converting files between XML
and JSON, streaming large documents and working with element paths.
"""

from .main import main

__all__ = ["main"]
