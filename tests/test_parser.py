"""
Link discovery and item parsing over rendered HTML.
"""

import unittest
from crawler.parser import extract_permalinks, parse_items, is_permalink


def item_html(user, text, counters=("3", "10", "2", "1.2K")):
    spans = "".join(
        f'<span data-testid="app-text-transition-container">{c}</span>' for c in counters
    )
    return (
        '<article data-testid="tweet">'
        f'<a tabindex="-1" href="/{user}">{user}</a>'
        f'<div data-testid="tweetText">{text}</div>'
        f'{spans}'
        '</article>'
    )


class TestExtractPermalinks(unittest.TestCase):
    def test_search_page_yields_only_item_permalinks(self):
        """Scenario: two permalink anchors and one non-matching anchor on a search page."""
        html = (
            '<a href="/status/111">a</a>'
            '<a href="/status/222">b</a>'
            '<a href="/about">c</a>'
        )
        links = extract_permalinks(html, "https://example.com/search?q=test")
        self.assertEqual(
            links,
            ["https://example.com/status/111", "https://example.com/status/222"]
        )

    def test_duplicates_are_collapsed_in_page_order(self):
        html = (
            '<a href="/jack/status/20">x</a>'
            '<a href="/jack/status/21">y</a>'
            '<a href="/jack/status/20">x again</a>'
        )
        links = extract_permalinks(html, "https://twitter.com/home")
        self.assertEqual(
            links,
            ["https://twitter.com/jack/status/20", "https://twitter.com/jack/status/21"]
        )

    def test_item_sub_resources_are_excluded(self):
        """Scenario: analytics and media links of an item are not permalinks."""
        html = (
            '<a href="/jack/status/20/analytics">analytics</a>'
            '<a href="/jack/status/20/photo/1">photo</a>'
            '<a href="/jack/status/abc">no digits</a>'
            '<a>no href</a>'
        )
        self.assertEqual(extract_permalinks(html, "https://twitter.com/"), [])

    def test_absolute_hrefs_are_kept(self):
        html = '<a href="https://twitter.com/jack/status/20">x</a>'
        self.assertEqual(
            extract_permalinks(html, "https://example.com/"),
            ["https://twitter.com/jack/status/20"]
        )

    def test_is_permalink(self):
        self.assertTrue(is_permalink("/a/status/123"))
        self.assertTrue(is_permalink("/a/status/123?s=20"))
        self.assertFalse(is_permalink("/a/status/123/retweets"))
        self.assertFalse(is_permalink(None))


class TestParseItems(unittest.TestCase):
    def test_primary_container_fields(self):
        html = item_html("alice", "hello\nworld") + item_html("bob", "reply")
        fields, reply_users = parse_items(html)
        self.assertEqual(fields, {
            "user": "alice",
            "content": "hello<br>world",
            "comment": "3",
            "like": "10",
            "share": "2",
            "view": "1.2K",
        })
        self.assertEqual(reply_users, ["bob"])

    def test_page_without_containers_is_empty(self):
        fields, reply_users = parse_items("<html><body><p>nothing here</p></body></html>")
        self.assertEqual(fields, {})
        self.assertEqual(reply_users, [])

    def test_container_without_text_is_empty(self):
        html = '<article data-testid="tweet"><a tabindex="-1">alice</a></article>'
        fields, _ = parse_items(html)
        self.assertEqual(fields, {})

    def test_missing_counters_default_to_blank(self):
        fields, _ = parse_items(item_html("alice", "hi", counters=("1",)))
        self.assertEqual(fields["comment"], "1")
        self.assertEqual(fields["view"], "")


if __name__ == "__main__":
    unittest.main()
