"""
FILE DESCRIPTION: Crawl orchestration over an authenticated session.
KEY FUNCTIONS/CLASSES: FrontierCrawler
"""

import threading
from urllib.parse import quote, urlparse
from playwright.sync_api import Error as PlaywrightError

from crawler.core import (
    DISCOVERY_SETTLE_TIME,
    EXTENDED_VIEWPORT_HEIGHT,
    EXTRACTION_SETTLE_TIME,
    LOGIN_URL,
    PLATFORM_HOME,
    PRE_NAVIGATION_DELAY,
    VIEWPORT_WIDTH,
    logger
)
from crawler.frontier import Frontier
from crawler.models import ItemCID, Record
from crawler.parser import extract_permalinks, parse_items
from crawler.session import SessionError, SessionNotReady
from proofs.storage import StorageError, make_json_blob

LOGIN_PATHS = (urlparse(LOGIN_URL).path, "/login")


class FrontierCrawler:
    """
    FLOW: Seeds the frontier from the query URL -> Pops one URL per iteration ->
    Renders and parses it into a Record -> Persists the record -> Anchors it and
    records the ItemCID under the current round -> Optionally discovers more links.

    Single worker: one crawler owns its frontier and session, nothing here is shared
    across threads except the stop event.
    """

    def __init__(self, session_manager, items, cids, content_store):
        self.session_manager = session_manager
        self.items = items
        self.cids = cids
        self.content_store = content_store
        self.frontier = Frontier()
        self.parsed = {}
        self._stop_event = threading.Event()

    # === DISCOVERY ===

    def discover_links(self, seed_url):
        session = self.session_manager.ensure_session()
        page = session.page
        logger.info(f"[DISCOVER] fetching list for {seed_url}")

        page.wait(PRE_NAVIGATION_DELAY)
        page.set_viewport(VIEWPORT_WIDTH, EXTENDED_VIEWPORT_HEIGHT)
        page.navigate(seed_url)
        # Client-side rendering needs time to mount the timeline
        page.wait(DISCOVERY_SETTLE_TIME)

        links = extract_permalinks(page.content(), seed_url)
        logger.info(f"[DISCOVER] {len(links)} permalink(s) on {seed_url}")
        return links

    # === EXTRACTION ===

    def extract_record(self, url, query=None, round_number=0):
        session = self.session_manager.ensure_session()
        page = session.page

        page.set_viewport(VIEWPORT_WIDTH, EXTENDED_VIEWPORT_HEIGHT)
        logger.info(f"[EXTRACT] {url}")
        page.navigate(url)
        page.wait(EXTRACTION_SETTLE_TIME)
        self._check_login_redirect(page, url)

        fields, reply_users = parse_items(page.content())
        record = Record(url=url, round=round_number, fields=fields)
        if record.is_empty:
            logger.info(f"[EXTRACT] no item container on {url}")

        if query is not None and query.is_recursive and reply_users:
            self._expand_replies(reply_users, query.search_term)
        return record

    def _check_login_redirect(self, page, url):
        path = urlparse(page.current_url or "").path
        if any(path.startswith(p) for p in LOGIN_PATHS):
            self.session_manager.invalidate()
            raise SessionError(f"redirected to login while loading {url}")

    def _expand_replies(self, users, search_term):
        for user in users:
            search_url = f"{PLATFORM_HOME}/search?q={quote(user)}%20{quote(search_term)}&src=typed_query"
            try:
                added = self.frontier.extend(self.discover_links(search_url))
                logger.info(f"[EXTRACT] reply expansion for {user}: {added} new link(s)")
            except (PlaywrightError, SessionError) as e:
                logger.warning(f"[EXTRACT] reply expansion for {user} failed: {e}")

    # === CRAWL LOOP ===

    def run(self, query):
        """
        Crawl until `query.limit` records are anchored, the frontier runs dry,
        or stop() is observed at an iteration boundary.
        """
        self.parsed = {}
        self.frontier = Frontier()
        seeds = self._seed(query.query)
        if seeds is None:
            return self.parsed
        self.frontier.extend(seeds)
        logger.info(f"[CRAWL] about to crawl {len(self.frontier)} items (limit={query.limit})")

        while len(self.parsed) < query.limit and not self._stop_event.is_set():
            if not self._session_ready():
                continue
            if self.frontier.is_empty():
                logger.info(f"[CRAWL] frontier exhausted with {len(self.parsed)}/{query.limit} items")
                break

            round_number = query.round_provider.update_round() if query.round_provider else 0
            url = self.frontier.pop()
            try:
                record = self.extract_record(url, query, round_number)
                if not record.is_empty:
                    self._persist(record)
                    self.parsed[url] = record
                if query.recursive:
                    added = self.frontier.extend(self.discover_links(url))
                    logger.info(f"[CRAWL] {added} new link(s) from {url}")
            except SessionError as e:
                logger.error(f"[CRAWL] session lost on {url}: {e}")
            except (PlaywrightError, StorageError) as e:
                logger.error(f"[CRAWL] failed on {url}: {e}")

        logger.info(f"[CRAWL] finished: {len(self.parsed)} item(s), {len(self.frontier)} left in frontier")
        return self.parsed

    def _seed(self, seed_url):
        while not self._stop_event.is_set():
            if not self._session_ready():
                continue
            try:
                return self.discover_links(seed_url)
            except SessionError as e:
                logger.error(f"[CRAWL] session lost while seeding: {e}")
            except PlaywrightError as e:
                logger.error(f"[CRAWL] could not render seed {seed_url}: {e}")
                return None
        return None

    def _session_ready(self):
        try:
            self.session_manager.ensure_session()
            return True
        except SessionNotReady as e:
            logger.info(f"[CRAWL] waiting {e.retry_in:.0f}s for session")
            self._stop_event.wait(e.retry_in)
        except SessionError as e:
            logger.error(f"[CRAWL] session negotiation failed: {e}")
        return False

    def _persist(self, record):
        self.items.create({"id": record.url, **record.to_dict()})
        cid = self.content_store.store(make_json_blob(record.to_dict()))
        item = ItemCID(id=record.url, round=record.round, cid=cid)
        self.cids.create(item.to_dict(), key=item.key)
        logger.info(f"[CRAWL] anchored {record.url} in round {record.round}: {cid}")

    def stop(self):
        self._stop_event.set()
        logger.info("[CRAWL] stop requested")
