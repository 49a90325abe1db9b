"""
lsif-diagram: architecture diagrams from LSIF code-intelligence dumps.

The pipeline ingests an LSIF stream into a graph store, resolves monikers for
definition ranges, synthesizes hierarchical names, builds a diagram model and
renders it as a LikeC4-style DSL.

"""

__version__ = "0.1.0"
