"""
FrontierCrawler: discovery, extraction and the crawl loop against mocked pages and stores.
"""

import unittest
from unittest.mock import MagicMock, patch
from playwright.sync_api import Error as PlaywrightError

from crawler.engine import FrontierCrawler
from crawler.models import CrawlQuery, Record
from crawler.session import SessionError, SessionNotReady
from proofs.storage import StorageError
from tests.test_parser import item_html

SEED = "https://example.com/search?q=test"


class CrawlerTestCase(unittest.TestCase):
    def setUp(self):
        self.session_manager = MagicMock()
        self.page = self.session_manager.ensure_session.return_value.page
        self.page.current_url = "https://twitter.com/alice/status/1"
        self.items = MagicMock()
        self.cids = MagicMock()
        self.content_store = MagicMock()
        self.content_store.store.return_value = "cidA"
        self.rounds = MagicMock()
        self.rounds.update_round.return_value = 7
        self.crawler = FrontierCrawler(self.session_manager, self.items, self.cids, self.content_store)

    def query(self, **kwargs):
        kwargs.setdefault("query", SEED)
        kwargs.setdefault("search_term", "test")
        kwargs.setdefault("round_provider", self.rounds)
        return CrawlQuery(**kwargs)


class TestDiscoverLinks(CrawlerTestCase):
    def test_seed_page_permalinks(self):
        self.page.content.return_value = (
            '<a href="/status/111">a</a><a href="/status/222">b</a><a href="/about">c</a>'
        )
        links = self.crawler.discover_links(SEED)

        self.assertEqual(set(links), {"https://example.com/status/111", "https://example.com/status/222"})
        self.page.navigate.assert_called_once_with(SEED)
        self.page.set_viewport.assert_called_once_with(1920, 10000)
        # pre-navigation delay then settle delay
        waits = [c.args[0] for c in self.page.wait.call_args_list]
        self.assertEqual(waits, [1, 5])


class TestExtractRecord(CrawlerTestCase):
    def test_primary_item_becomes_record(self):
        self.page.content.return_value = item_html("alice", "gm")
        record = self.crawler.extract_record("https://twitter.com/alice/status/1", round_number=3)

        self.assertEqual(record.url, "https://twitter.com/alice/status/1")
        self.assertEqual(record.round, 3)
        self.assertEqual(record.fields["user"], "alice")
        self.assertEqual(record.fields["content"], "gm")
        self.page.wait.assert_called_once_with(2)

    def test_page_without_container_returns_empty_record(self):
        self.page.content.return_value = "<html><body>suspended account</body></html>"
        record = self.crawler.extract_record("https://twitter.com/x/status/9")
        self.assertTrue(record.is_empty)
        self.assertEqual(record.fields, {})

    def test_login_redirect_invalidates_session(self):
        self.page.current_url = "https://twitter.com/i/flow/login?redirect_after_login=%2Fx"
        with self.assertRaises(SessionError):
            self.crawler.extract_record("https://twitter.com/x/status/9")
        self.session_manager.invalidate.assert_called_once()

    def test_reply_expansion_queues_search_results(self):
        self.page.content.return_value = item_html("alice", "gm") + item_html("bob", "gm back")
        with patch.object(self.crawler, "discover_links", return_value=["https://twitter.com/bob/status/5"]) as discover:
            record = self.crawler.extract_record(
                "https://twitter.com/alice/status/1", self.query(is_recursive=True, search_term="web3")
            )

        self.assertEqual(record.fields["user"], "alice")
        searched = discover.call_args.args[0]
        self.assertIn("/search?q=bob%20web3", searched)
        self.assertEqual(self.crawler.frontier.pending(), ["https://twitter.com/bob/status/5"])

    def test_reply_expansion_failure_keeps_primary_record(self):
        self.page.content.return_value = item_html("alice", "gm") + item_html("bob", "gm back")
        with patch.object(self.crawler, "discover_links", side_effect=PlaywrightError("navigation failed")):
            record = self.crawler.extract_record(
                "https://twitter.com/alice/status/1", self.query(is_recursive=True)
            )
        self.assertEqual(record.fields["user"], "alice")
        self.assertTrue(self.crawler.frontier.is_empty())

    def test_no_expansion_without_recursive_flag(self):
        self.page.content.return_value = item_html("alice", "gm") + item_html("bob", "gm back")
        with patch.object(self.crawler, "discover_links") as discover:
            self.crawler.extract_record("https://twitter.com/alice/status/1", self.query())
        discover.assert_not_called()


class TestRun(CrawlerTestCase):
    URLS = ["https://example.com/status/111", "https://example.com/status/222"]

    def record_for(self, url, query=None, round_number=0):
        return Record(url=url, round=round_number, fields={"user": "alice", "content": url})

    def test_limit_one_leaves_second_url_in_frontier(self):
        with patch.object(self.crawler, "discover_links", return_value=list(self.URLS)), \
             patch.object(self.crawler, "extract_record", side_effect=self.record_for) as extract:
            parsed = self.crawler.run(self.query(limit=1))

        self.assertEqual(list(parsed), [self.URLS[0]])
        self.assertEqual(extract.call_count, 1)
        self.assertEqual(self.crawler.frontier.pending(), [self.URLS[1]])

    def test_records_are_persisted_and_anchored_under_current_round(self):
        with patch.object(self.crawler, "discover_links", return_value=[self.URLS[0]]), \
             patch.object(self.crawler, "extract_record", side_effect=self.record_for):
            self.crawler.run(self.query(limit=1))

        stored = self.items.create.call_args.args[0]
        self.assertEqual(stored["id"], self.URLS[0])
        self.assertEqual(stored["round"], 7)
        self.content_store.store.assert_called_once()
        self.assertIn("data.json", self.content_store.store.call_args.args[0])
        self.cids.create.assert_called_once_with(
            {"id": self.URLS[0], "round": 7, "cid": "cidA"}, key=f"7:{self.URLS[0]}"
        )

    def test_empty_records_are_skipped_and_frontier_exhaustion_terminates(self):
        empty = lambda url, query=None, round_number=0: Record(url=url, round=round_number)
        with patch.object(self.crawler, "discover_links", return_value=list(self.URLS)), \
             patch.object(self.crawler, "extract_record", side_effect=empty):
            parsed = self.crawler.run(self.query(limit=5))

        self.assertEqual(parsed, {})
        self.items.create.assert_not_called()
        self.content_store.store.assert_not_called()
        self.assertTrue(self.crawler.frontier.is_empty())

    def test_failed_item_is_logged_and_loop_continues(self):
        def flaky(url, query=None, round_number=0):
            if url == self.URLS[0]:
                raise PlaywrightError("page crashed")
            return self.record_for(url, query, round_number)

        with patch.object(self.crawler, "discover_links", return_value=list(self.URLS)), \
             patch.object(self.crawler, "extract_record", side_effect=flaky):
            parsed = self.crawler.run(self.query(limit=2))

        self.assertEqual(list(parsed), [self.URLS[1]])

    def test_storage_failure_does_not_count_toward_limit(self):
        self.content_store.store.side_effect = [StorageError("upload failed"), "cidB"]
        with patch.object(self.crawler, "discover_links", return_value=list(self.URLS)), \
             patch.object(self.crawler, "extract_record", side_effect=self.record_for):
            parsed = self.crawler.run(self.query(limit=2))

        self.assertEqual(list(parsed), [self.URLS[1]])
        self.cids.create.assert_called_once_with(
            {"id": self.URLS[1], "round": 7, "cid": "cidB"}, key=f"7:{self.URLS[1]}"
        )

    def test_recursive_crawl_appends_discovered_links(self):
        discovered = {
            SEED: [self.URLS[0]],
            self.URLS[0]: [self.URLS[0], self.URLS[1]],
            self.URLS[1]: [],
        }
        with patch.object(self.crawler, "discover_links", side_effect=lambda url: discovered[url]), \
             patch.object(self.crawler, "extract_record", side_effect=self.record_for):
            parsed = self.crawler.run(self.query(limit=5, recursive=True))

        self.assertEqual(list(parsed), self.URLS)

    def test_stop_before_run_exits_without_crawling(self):
        self.crawler.stop()
        with patch.object(self.crawler, "discover_links", return_value=list(self.URLS)) as discover:
            parsed = self.crawler.run(self.query(limit=1))
        self.assertEqual(parsed, {})
        discover.assert_not_called()

    def test_stop_is_observed_at_next_iteration(self):
        def extract_then_stop(url, query=None, round_number=0):
            self.crawler.stop()
            return self.record_for(url, query, round_number)

        with patch.object(self.crawler, "discover_links", return_value=list(self.URLS)), \
             patch.object(self.crawler, "extract_record", side_effect=extract_then_stop):
            parsed = self.crawler.run(self.query(limit=5))

        self.assertEqual(list(parsed), [self.URLS[0]])
        self.assertEqual(self.crawler.frontier.pending(), [self.URLS[1]])

    def test_session_backoff_waits_without_popping(self):
        self.session_manager.ensure_session.side_effect = [
            None,                    # seeding
            SessionNotReady(0.01),   # first loop iteration backs off
            None,
        ]
        with patch.object(self.crawler, "discover_links", return_value=list(self.URLS)), \
             patch.object(self.crawler, "extract_record", side_effect=self.record_for):
            parsed = self.crawler.run(self.query(limit=1))

        self.assertEqual(list(parsed), [self.URLS[0]])
        self.assertEqual(self.crawler.frontier.pending(), [self.URLS[1]])


if __name__ == "__main__":
    unittest.main()
