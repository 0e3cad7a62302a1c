"""
Re-validation of another node's round submission.
Re-crawls a sample of the anchored items and compares them with what was submitted.
"""

import random
from playwright.sync_api import Error as PlaywrightError
from crawler.core import AUDIT_SAMPLE_SIZE, logger
from proofs.storage import StorageError

COMPARED_FIELDS = ("user", "content")


class SubmissionAuditor:
    """
    FLOW: Retrieves the proof bundle for a CID -> Checks it is a non-empty list of items
    for the claimed round -> Picks a CID-seeded sample -> Retrieves each item blob ->
    Re-extracts the URL with its own crawler -> Votes True only if every sample matches.
    SessionError from the auditor's own login propagates: no vote can be cast without a session.
    """

    def __init__(self, crawler, content_store, sample_size=AUDIT_SAMPLE_SIZE):
        self.crawler = crawler
        self.content_store = content_store
        self.sample_size = sample_size

    def validate(self, submission_cid, round_number):
        try:
            bundle = self.content_store.retrieve_json(submission_cid)
        except StorageError as e:
            logger.warning(f"[AUDIT] {submission_cid}: unreadable proof: {e}")
            return False

        items = bundle.get("items") if isinstance(bundle, dict) else None
        if not items:
            logger.warning(f"[AUDIT] {submission_cid}: proof lists no items")
            return False
        if any(not isinstance(i, dict) or i.get("round") != round_number for i in items):
            logger.warning(f"[AUDIT] {submission_cid}: items outside round {round_number}")
            return False

        # Seeded by the CID so every auditor checks the same sample
        rng = random.Random(submission_cid)
        sample = rng.sample(items, min(self.sample_size, len(items)))
        for entry in sample:
            if not self._check_item(entry):
                logger.warning(f"[AUDIT] {submission_cid}: item {entry.get('id')} failed re-validation")
                return False

        logger.info(f"[AUDIT] {submission_cid}: {len(sample)} sampled item(s) verified for round {round_number}")
        return True

    def _check_item(self, entry):
        url = entry.get("id")
        cid = entry.get("cid")
        if not url or not cid:
            return False
        try:
            submitted = self.content_store.retrieve_json(cid)
        except StorageError as e:
            logger.warning(f"[AUDIT] item blob {cid} unreadable: {e}")
            return False
        if not isinstance(submitted, dict) or submitted.get("url") != url:
            return False

        try:
            record = self.crawler.extract_record(url)
        except PlaywrightError as e:
            logger.warning(f"[AUDIT] could not re-crawl {url}: {e}")
            return False
        if record.is_empty:
            return False
        return all(record.fields.get(f) == submitted.get(f) for f in COMPARED_FIELDS)
