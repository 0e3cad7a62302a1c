import json
from abc import ABC, abstractmethod
from typing import Dict


class StorageError(Exception):
    """Raised when a content-addressed write or read fails."""
    pass


def make_json_blob(obj, name="data.json") -> Dict[str, bytes]:
    """Serialize obj into a single named blob ready for ContentStore.store()."""
    payload = json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return {name: payload.encode("utf-8")}


class ContentStore(ABC):
    """
    Abstract interface for content-addressed storage.
    A store call commits every named blob together and returns one CID for the set.
    """

    @abstractmethod
    def store(self, named_blobs: Dict[str, bytes]) -> str:
        """
        Persist the blobs and return the content identifier.
        Raises StorageError on failure.
        """
        pass

    @abstractmethod
    def retrieve(self, cid: str, name: str = "data.json") -> bytes:
        """Fetch one named blob previously committed under cid."""
        pass

    def retrieve_json(self, cid: str, name: str = "data.json"):
        raw = self.retrieve(cid, name)
        try:
            return json.loads(raw)
        except ValueError as e:
            raise StorageError(f"blob {cid}/{name} is not valid JSON") from e
