import copy
import json
import logging
import os
import shutil
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

from scoreverse.core.config import settings
from scoreverse.core.exceptions import StoreWriteError

logger = logging.getLogger(__name__)

# Collections partitioned per user account
USER_COLLECTIONS = ("players", "games", "matches", "spaces", "tournaments")
# Collections shared by the whole installation
GLOBAL_COLLECTIONS = ("users", "shares")

Document = Dict[str, Any]
Snapshot = List[Document]
Listener = Callable[[Snapshot], None]


class Subscription:
    """Handle returned by DocumentStore.subscribe. Call unsubscribe() to stop delivery."""

    def __init__(self, store: "DocumentStore", key: Tuple[Optional[str], str], listener: Listener):
        self._store = store
        self._key = key
        self._listener = listener
        self.active = True

    def unsubscribe(self):
        if self.active:
            self._store._remove_listener(self._key, self._listener)
            self.active = False


class DocumentStore:
    """
    JSON-file document store.

    Every collection is a single file holding a list of documents. Per-user
    collections live under ``<data_dir>/users/<owner_id>/``. Listeners receive
    the full collection snapshot (never a delta) after each successful write.
    """

    def __init__(self, data_dir: str = None):
        self.data_dir = data_dir or settings.DATA_DIR
        os.makedirs(self.data_dir, exist_ok=True)
        self._lock = threading.RLock()
        self._listeners: Dict[Tuple[Optional[str], str], List[Listener]] = {}

    # --- Paths and raw file access ---

    def _path(self, collection: str, owner_id: Optional[str] = None) -> str:
        if collection in GLOBAL_COLLECTIONS:
            return os.path.join(self.data_dir, f"{collection}.json")
        if collection not in USER_COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection}")
        if not owner_id:
            raise ValueError(f"Collection '{collection}' requires an owner id.")
        return os.path.join(self.data_dir, "users", owner_id, f"{collection}.json")

    def _load(self, path: str) -> Snapshot:
        if not os.path.exists(path):
            return []
        try:
            with open(path, "r") as f:
                content = f.read()
            if not content:
                return []
            documents = json.loads(content)
        except json.JSONDecodeError:
            logger.warning("Could not decode JSON from %s, treating it as an empty collection", path)
            return []
        if not isinstance(documents, list):
            logger.warning("Expected a list of documents in %s, got %s", path, type(documents).__name__)
            return []
        return documents

    def _save(self, path: str, documents: Snapshot):
        tmp_path = path + ".tmp"
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(tmp_path, "w") as f:
                json.dump(documents, f, indent=4, default=str)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error("Failed to write %s: %s", path, e)
            raise StoreWriteError(f"Could not save {os.path.basename(path)}: {e}") from e

    # --- Reads ---

    def list(self, collection: str, owner_id: Optional[str] = None) -> Snapshot:
        with self._lock:
            return self._load(self._path(collection, owner_id))

    def get(self, collection: str, doc_id: str, owner_id: Optional[str] = None) -> Optional[Document]:
        for doc in self.list(collection, owner_id):
            if doc.get("id") == doc_id:
                return doc
        return None

    def query(self, collection: str, owner_id: Optional[str] = None, **equals: Any) -> Snapshot:
        """Documents whose fields equal every keyword given; a missing field compares as None."""
        return [
            doc for doc in self.list(collection, owner_id)
            if all(doc.get(field) == value for field, value in equals.items())
        ]

    def exists(self, collection: str, owner_id: Optional[str] = None, **equals: Any) -> bool:
        return bool(self.query(collection, owner_id, **equals))

    # --- Writes ---

    def create(self, collection: str, document: Document, owner_id: Optional[str] = None) -> Document:
        if not document.get("id"):
            raise ValueError("Documents must carry an 'id'.")
        path = self._path(collection, owner_id)
        with self._lock:
            documents = self._load(path)
            if any(doc.get("id") == document["id"] for doc in documents):
                raise ValueError(f"Document {document['id']} already exists in {collection}.")
            documents.append(document)
            self._save(path, documents)
        self._notify(owner_id, collection, documents)
        return document

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any], owner_id: Optional[str] = None) -> Optional[Document]:
        """Partial-field update. Returns the updated document, or None if it does not exist."""
        if "id" in fields and fields["id"] != doc_id:
            raise ValueError("Document ID cannot be changed.")
        path = self._path(collection, owner_id)
        with self._lock:
            documents = self._load(path)
            for doc in documents:
                if doc.get("id") == doc_id:
                    doc.update(fields)
                    updated = doc
                    break
            else:
                return None
            self._save(path, documents)
        self._notify(owner_id, collection, documents)
        return updated

    def delete(self, collection: str, doc_id: str, owner_id: Optional[str] = None) -> bool:
        path = self._path(collection, owner_id)
        with self._lock:
            documents = self._load(path)
            remaining = [doc for doc in documents if doc.get("id") != doc_id]
            if len(remaining) == len(documents):
                return False
            self._save(path, remaining)
        self._notify(owner_id, collection, remaining)
        return True

    def delete_owner(self, owner_id: str):
        """Remove every per-user collection of an account."""
        owner_dir = os.path.join(self.data_dir, "users", owner_id)
        with self._lock:
            try:
                shutil.rmtree(owner_dir, ignore_errors=False)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.error("Failed to remove data for owner %s: %s", owner_id, e)
                raise StoreWriteError(f"Could not delete data for owner {owner_id}: {e}") from e
        for collection in USER_COLLECTIONS:
            self._notify(owner_id, collection, [])

    # --- Realtime listeners ---

    def subscribe(self, owner_id: Optional[str], collection: str, listener: Listener) -> Subscription:
        """Register a snapshot listener. The current snapshot is delivered immediately."""
        self._path(collection, owner_id) # validates the collection name
        key = (owner_id if collection in USER_COLLECTIONS else None, collection)
        with self._lock:
            self._listeners.setdefault(key, []).append(listener)
            snapshot = self._load(self._path(collection, owner_id))
        self._deliver(listener, collection, snapshot)
        return Subscription(self, key, listener)

    def _remove_listener(self, key: Tuple[Optional[str], str], listener: Listener):
        with self._lock:
            listeners = self._listeners.get(key, [])
            if listener in listeners:
                listeners.remove(listener)
            if not listeners:
                self._listeners.pop(key, None)

    def _notify(self, owner_id: Optional[str], collection: str, documents: Snapshot):
        key = (owner_id if collection in USER_COLLECTIONS else None, collection)
        with self._lock:
            listeners = list(self._listeners.get(key, []))
        for listener in listeners:
            self._deliver(listener, collection, documents)

    def _deliver(self, listener: Listener, collection: str, documents: Snapshot):
        # Each listener gets its own copy so it can never mutate stored state
        try:
            listener(copy.deepcopy(documents))
        except Exception:
            logger.exception("Snapshot listener for '%s' failed", collection)
