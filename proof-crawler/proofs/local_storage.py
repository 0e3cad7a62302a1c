#To anchor blobs on local disk when no remote store is configured
# Input: named blobs
# Output: sha256 identifier over the sorted (name, content) pairs

import hashlib
import re
from pathlib import Path
from crawler.core import DATA_DIR, logger
from proofs.storage import ContentStore, StorageError

_CID = re.compile(r"^sha256-[0-9a-f]{64}$")


class LocalContentStore(ContentStore):
    def __init__(self, root=None):
        self.root = Path(root or DATA_DIR / "blobs")

    @staticmethod
    def compute_cid(named_blobs):
        sha = hashlib.sha256()
        for name in sorted(named_blobs):
            sha.update(name.encode("utf-8"))
            sha.update(b"\0")
            sha.update(named_blobs[name])
            sha.update(b"\0")
        return "sha256-" + sha.hexdigest()

    def store(self, named_blobs):
        if not named_blobs:
            raise StorageError("nothing to store")
        cid = self.compute_cid(named_blobs)
        target = self.root / cid
        try:
            target.mkdir(parents=True, exist_ok=True)
            for name, data in named_blobs.items():
                (target / name).write_bytes(data)
        except OSError as e:
            raise StorageError(f"local write failed for {cid}: {e}") from e
        logger.info(f"[STORAGE] stored {len(named_blobs)} file(s) locally with cid: {cid}")
        return cid

    def retrieve(self, cid, name="data.json"):
        if not _CID.match(cid or "") or "/" in name or name.startswith("."):
            raise StorageError(f"invalid local blob reference {cid}/{name}")
        path = self.root / cid / name
        try:
            return path.read_bytes()
        except OSError as e:
            raise StorageError(f"retrieve {cid}/{name} failed: {e}") from e
