"""arxport - AUTOSAR ARXML export tool.

arxport reads an AUTOSAR ARXML document and derives three artifacts from it:
a component interaction (sequence) diagram, a behavioral state diagram and a
structured requirements table.

Core principles:
- Two-pass resolution: every short-name path is indexed before any reference
  is resolved, so forward references are legal
- Reproducibility: same input produces identical diagrams and tables
- Immutability: the domain model is never mutated after construction
- Independent options: one failing export option never blocks the others
- Graceful degradation: unknown ARXML elements are kept, never dropped
"""

__version__ = "0.1.0"
__author__ = "arxport contributors"
