"""
Terminal rendering and live reload for beadboard using Rich.

Provides the board renderer and the polling watcher that keeps a live
board in sync with the beads data files.
"""

from beadboard.dashboard.renderer import BoardRenderer
from beadboard.dashboard.watcher import DatasetWatcher

__all__ = ["BoardRenderer", "DatasetWatcher"]
