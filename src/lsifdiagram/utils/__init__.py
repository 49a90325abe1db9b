"""Utility modules for lsif-diagram."""
