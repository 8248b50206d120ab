"""
View/navigation state for the board.
"""

from .state import BucketView, ColumnState, ConfirmRequest, Overlay, ViewMode
from .store import BoardStore

__all__ = [
    "BoardStore",
    "BucketView",
    "ColumnState",
    "ConfirmRequest",
    "Overlay",
    "ViewMode",
]
