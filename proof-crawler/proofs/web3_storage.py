"""
HTTP client for a web3.storage-compatible upload API.
Uploads are multipart; reads go through an IPFS gateway.
"""

import requests
from crawler.core import (
    WEB3STORAGE_API,
    WEB3STORAGE_TOKEN,
    IPFS_GATEWAY,
    STORAGE_TIMEOUT,
    logger
)
from proofs.storage import ContentStore, StorageError


class Web3StorageClient(ContentStore):
    """
    FLOW: Packs named blobs into a multipart upload -> POSTs to /upload with the bearer token ->
    Returns the root CID from the JSON response. Failures surface as StorageError, never retried here.
    """

    def __init__(self, token=WEB3STORAGE_TOKEN, api_url=WEB3STORAGE_API,
                 gateway_url=IPFS_GATEWAY, timeout=STORAGE_TIMEOUT, session=None):
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.gateway_url = gateway_url.rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    def store(self, named_blobs):
        if not named_blobs:
            raise StorageError("nothing to store")
        if not self.token:
            raise StorageError("WEB3STORAGE_TOKEN is not set")

        files = [
            ("file", (name, data, "application/json"))
            for name, data in named_blobs.items()
        ]
        try:
            r = self.http.post(
                f"{self.api_url}/upload",
                files=files,
                headers={"Authorization": f"Bearer {self.token}"},
                timeout=self.timeout,
            )
            r.raise_for_status()
            cid = r.json().get("cid")
        except requests.exceptions.RequestException as e:
            raise StorageError(f"upload failed: {e}") from e
        except ValueError as e:
            raise StorageError("upload returned a non-JSON response") from e

        if not cid:
            raise StorageError("upload response carried no cid")
        logger.info(f"[STORAGE] stored {len(files)} file(s) with cid: {cid}")
        return cid

    def retrieve(self, cid, name="data.json"):
        try:
            r = self.http.get(f"{self.gateway_url}/{cid}/{name}", timeout=self.timeout)
            r.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise StorageError(f"retrieve {cid}/{name} failed: {e}") from e
        return r.content
