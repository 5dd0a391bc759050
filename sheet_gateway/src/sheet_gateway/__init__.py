"""
Sheet Gateway - CRUD gateway over spreadsheet-like row stores

A single-endpoint data-access service exposing schema-driven collections,
equality-filtered reads, read-time enrichment and ordered batch writes on top
of a store that only knows header rows and positional cells.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
