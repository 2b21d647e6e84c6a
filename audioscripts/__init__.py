"""Core package for marker standardization, validation and analysis.

The CLI scripts at the repository root import from here.
"""
