import atexit
import copy
import logging
import os
import pickle
import threading
from contextlib import contextmanager
from pathlib import Path

from carhire.exceptions import StoreError

logger = logging.getLogger(__name__)

# ---- Paths ----
BASE_DIR = Path(__file__).resolve().parents[2]
DEFAULT_DATA_PATH = BASE_DIR / "data.pkl"

COLLECTIONS = ("vehicles", "rentals")


class Store:
    """
    Pickle-backed document store holding one dict per collection.

    A single re-entrant lock guards every read and every read-modify-write.
    ``transaction()`` holds that lock across a whole check-then-act sequence,
    writes the file once on success and undoes the changed documents on failure.
    """

    def __init__(self, path: str | os.PathLike | None = None, autosave: bool = True):
        self.path = str(path or DEFAULT_DATA_PATH)
        self.vehicles: dict[str, dict] = {}
        self.rentals: dict[str, dict] = {}
        self._rw = threading.RLock()
        self._depth = 0
        self._undo: list[tuple[str, str, dict | None]] = []
        self._seen: set[tuple[str, str]] = set()

        logger.info("Using store file %s", self.path)
        self._load()

        # Automatically save on exit (skipped in test environments)
        if autosave:
            atexit.register(self.save)

    # ---------- Persistence ----------
    def _load(self):
        """Load data from the pickle file, or start empty if there is none yet."""
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "rb") as f:
                data = pickle.load(f)
        except (OSError, pickle.UnpicklingError, EOFError) as e:
            raise StoreError(f"Error: could not load store file {self.path}") from e

        if isinstance(data, dict):
            self.vehicles = data.get("vehicles", {}) or {}
            self.rentals = data.get("rentals", {}) or {}
            logger.info("Loaded store: vehicles=%d, rentals=%d", len(self.vehicles), len(self.rentals))
        else:
            # Incompatible data format: back up the old file and start empty
            bak = self.path + ".bak"
            try:
                os.replace(self.path, bak)
            except OSError as e:
                raise StoreError(f"Error: could not back up incompatible store {self.path}") from e
            logger.warning("Incompatible store (%s); backed up to %s. Starting empty.", type(data).__name__, bak)

    def _dump(self):
        """Write the in-memory data to the pickle file safely (atomic replace)."""
        tmp = self.path + ".tmp"
        payload = {name: getattr(self, name) for name in COLLECTIONS}
        try:
            os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
            with open(tmp, "wb") as f:
                pickle.dump(payload, f, protocol=pickle.HIGHEST_PROTOCOL)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except (OSError, pickle.PicklingError) as e:
            logger.exception("Saving store to %s failed", self.path)
            raise StoreError(f"Error: could not write store file {self.path}") from e

    def save(self):
        """Thread-safe save method."""
        with self._rw:
            self._dump()

    @contextmanager
    def read(self):
        """Hold the lock while a caller iterates or copies a collection."""
        with self._rw:
            yield self

    def remember(self, collection: str, doc_id: str):
        """
        Record a document's state before it is changed, once per transaction.
        ``None`` marks a document that did not exist yet.
        """
        key = (collection, doc_id)
        if self._depth == 0 or key in self._seen:
            return
        self._seen.add(key)
        doc = getattr(self, collection).get(doc_id)
        self._undo.append((collection, doc_id, copy.deepcopy(doc) if doc is not None else None))

    def _rollback(self):
        for collection, doc_id, previous in reversed(self._undo):
            docs = getattr(self, collection)
            if previous is None:
                docs.pop(doc_id, None)
            else:
                docs[doc_id] = previous

    @contextmanager
    def transaction(self):
        """
        Serialise a unit of work against every other writer.
        Nested transactions join the outermost one. On failure only the
        documents recorded through ``remember`` are put back.
        """
        with self._rw:
            outermost = self._depth == 0
            self._depth += 1
            try:
                yield self
                if outermost:
                    self._dump()
            except BaseException:
                if outermost:
                    self._rollback()
                raise
            finally:
                self._depth -= 1
                if outermost:
                    self._undo = []
                    self._seen = set()

    def clear(self):
        """Drop every document in every collection."""
        with self.transaction():
            for name in COLLECTIONS:
                docs = getattr(self, name)
                for doc_id in list(docs):
                    self.remember(name, doc_id)
                docs.clear()
