"""
Data file polling for the live board.

Watches the beads data files for changes and reloads the dataset once
the files have been quiet for a debounce window.
"""

import logging
import threading
import time
from collections.abc import Callable
from pathlib import Path

from beadboard.core.issues.exceptions import BeadboardError
from beadboard.core.issues.loader import load_dataset
from beadboard.core.issues.models import Dataset

logger = logging.getLogger(__name__)

# beads.db-wal changes on every write while the database is in WAL mode
WATCHED_FILES = ("beads.db", "beads.db-wal", "issues.jsonl")

ReloadCallback = Callable[[Dataset], None]
Fingerprint = tuple[tuple[str, int | None, int | None], ...]


class DatasetWatcher:
    """
    Poll the beads data files and reload on change.

    A change starts a debounce window; further changes restart it. When
    a poll finds the window has passed without another change, exactly
    one reload runs and every subscriber receives the new Dataset.

    Example:
        >>> watcher = DatasetWatcher(Path(".beads"), on_reload=store.apply_reload)
        >>> stop = threading.Event()
        >>> watcher.run(stop)  # blocks until stop is set
    """

    def __init__(
        self,
        beads_dir: Path,
        on_reload: ReloadCallback | None = None,
        loader: Callable[[Path], Dataset] = load_dataset,
        debounce: float = 0.1,
        poll_interval: float = 0.25,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the watcher.

        Args:
            beads_dir: The .beads directory to watch
            on_reload: Initial subscriber for reloaded datasets
            loader: Function loading a Dataset from beads_dir
            debounce: Quiet period in seconds before a change triggers a reload
            poll_interval: Seconds between polls in run()
            clock: Monotonic time source
        """
        self.beads_dir = Path(beads_dir)
        self.loader = loader
        self.debounce = debounce
        self.poll_interval = poll_interval
        self.clock = clock

        self._subscribers: list[ReloadCallback] = []
        if on_reload is not None:
            self._subscribers.append(on_reload)

        self._last_fingerprint = self._fingerprint()
        self._pending_since: float | None = None

    def _fingerprint(self) -> Fingerprint:
        """(name, mtime_ns, size) for each watched file; None fields when absent."""
        entries = []
        for name in WATCHED_FILES:
            try:
                stat = (self.beads_dir / name).stat()
                entries.append((name, stat.st_mtime_ns, stat.st_size))
            except OSError:
                entries.append((name, None, None))
        return tuple(entries)

    @property
    def pending(self) -> bool:
        """True while a change is waiting out the debounce window."""
        return self._pending_since is not None

    def subscribe(self, callback: ReloadCallback) -> Callable[[], None]:
        """
        Register a callback for reloaded datasets.

        Returns:
            Function that removes the callback again
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def poll(self) -> Dataset | None:
        """
        Check the data files once.

        Returns:
            The reloaded Dataset if this poll triggered a reload, else None
        """
        fingerprint = self._fingerprint()
        if fingerprint != self._last_fingerprint:
            self._last_fingerprint = fingerprint
            self._pending_since = self.clock()
            return None

        if self._pending_since is not None and self.clock() - self._pending_since >= self.debounce:
            self._pending_since = None
            return self.reload()
        return None

    def reload(self) -> Dataset | None:
        """
        Load the dataset now and notify subscribers.

        A failed load is logged and leaves subscribers untouched.

        Returns:
            The loaded Dataset, or None if loading failed
        """
        self._pending_since = None
        try:
            dataset = self.loader(self.beads_dir)
        except BeadboardError as e:
            logger.warning(f"Reload of {self.beads_dir} failed: {e}")
            return None
        except Exception:
            logger.exception(f"Unexpected error reloading {self.beads_dir}")
            return None

        logger.debug(f"Reloaded {dataset.stats.total} issues from {self.beads_dir}")
        for callback in list(self._subscribers):
            try:
                callback(dataset)
            except Exception as e:
                logger.warning(f"Error in watcher callback: {e}")
        return dataset

    def run(self, stop: threading.Event) -> None:
        """Poll until ``stop`` is set."""
        while not stop.wait(self.poll_interval):
            self.poll()
