"""
Kanban board ordering.

Keeps each (project, status) column numbered 0..n-1 across inserts,
moves and deletes.
"""

from roadmate.core.board.index import BoardIndex, column_of

__all__ = ["BoardIndex", "column_of"]
