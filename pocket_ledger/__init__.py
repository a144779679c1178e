"""
Pocket Ledger - Source Package

A personal income/expense ledger with split-expense tracking,
monthly summaries and CSV export.

DESIGN PRINCIPLES:
1. Validate before every write, never coerce
2. Fail early, fail visibly
3. Summaries and exports are pure functions of the entries
4. Every action is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
