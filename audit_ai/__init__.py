"""Audit AI - document analysis and project chat service."""

__version__ = "0.1.0"
