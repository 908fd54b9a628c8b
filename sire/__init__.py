"""
SIRE package
============

This package contains the Storm Impact Ranking Engine (SIRE).

- The CLI entry point is in `sire/cli.py`.
- The pipeline (aggregate -> threshold -> rank -> top-N) is in `sire/engine.py`.
- The ranking rules themselves are in `sire/scoring.py`.
- Dataset loading is in `sire/loader.py`.
"""

__version__ = '0.3.0'
