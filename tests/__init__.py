"""Test suite for lsif-diagram."""
