"""
FILE DESCRIPTION: Lifecycle of one crawl task across rounds.
KEY FUNCTIONS/CLASSES: RoundTask, build_task, build_content_store
"""

import threading
from crawler.core import (
    CONTENT_STORE,
    TWITTER_USERNAME,
    TWITTER_PASSWORD,
    logger
)
from crawler.engine import FrontierCrawler
from crawler.session import SessionManager
from crawler.storage.data_store import DataStore
from proofs.aggregator import ProofAggregator
from proofs.local_storage import LocalContentStore
from proofs.web3_storage import Web3StorageClient
from rounds.audit import SubmissionAuditor
from rounds.provider import ClockRoundProvider


class RoundTask:
    """
    FLOW: start() launches the crawl on a dedicated thread unless one is already alive ->
    the thread owns the browser and closes the session when the crawl ends ->
    fetch_submission() returns the proof of the previous round ->
    audit_submission() re-validates another node's proof with a separate crawler.
    """

    def __init__(self, round_provider, crawler_factory, aggregator):
        self.round_provider = round_provider
        self.crawler_factory = crawler_factory
        self.aggregator = aggregator
        self.crawler = None
        self._thread = None
        self._lock = threading.Lock()

    def is_running(self):
        return self._thread is not None and self._thread.is_alive()

    def start(self, query):
        round_number = self.round_provider.get_current_round()
        with self._lock:
            if self.is_running():
                logger.info(f"[TASK] crawler already running at round {round_number}")
                return False
            if query.round_provider is None:
                query.round_provider = self.round_provider
            self.crawler = self.crawler_factory()
            self._thread = threading.Thread(
                target=self._run, args=(self.crawler, query), daemon=True, name="CrawlTask"
            )
            self._thread.start()
        logger.info(f"[TASK] started a new crawler at round {round_number}")
        return True

    @staticmethod
    def _run(crawler, query):
        try:
            crawler.run(query)
        except Exception:
            logger.exception("[TASK] crawler stopped on an unexpected error")
        finally:
            crawler.session_manager.close()

    def stop(self, timeout=None):
        if self.crawler is not None:
            self.crawler.stop()
        self.join(timeout)

    def join(self, timeout=None):
        if self._thread is not None:
            self._thread.join(timeout)

    def fetch_submission(self):
        round_number = self.round_provider.get_current_round()
        last_round = max(round_number - 1, 0)
        cid = self.aggregator.get_proof_cid(last_round)
        logger.info(f"[TASK] submission for round {last_round}: {cid}")
        return cid

    def audit_submission(self, submission_cid, round_number):
        crawler = self.crawler_factory()
        try:
            auditor = SubmissionAuditor(crawler, self.aggregator.content_store)
            return auditor.validate(submission_cid, round_number)
        finally:
            crawler.session_manager.close()


def build_content_store(kind=CONTENT_STORE):
    if kind == "web3":
        return Web3StorageClient()
    if kind == "local":
        return LocalContentStore()
    raise ValueError(f"unknown content store: {kind!r}")


def build_task(round_provider=None, credentials=None, content_store=None, db_path=None):
    """Wire a RoundTask from configuration: three sqlite stores, one content store, fresh crawlers."""
    credentials = credentials or {"username": TWITTER_USERNAME, "password": TWITTER_PASSWORD}
    content_store = content_store or build_content_store()
    round_provider = round_provider or ClockRoundProvider()
    items = DataStore("items", db_path)
    cids = DataStore("cids", db_path)
    proofs = DataStore("proofs", db_path)

    def crawler_factory():
        return FrontierCrawler(SessionManager(credentials), items, cids, content_store)

    return RoundTask(round_provider, crawler_factory, ProofAggregator(proofs, cids, content_store))
