"""
Rendered-HTML extraction for the crawler.
Finds item permalinks and parses item containers into field mappings.
"""

import re
from bs4 import BeautifulSoup
from urllib.parse import urljoin

# Item permalink: numeric id segment, nothing after it but a non-slash suffix
PERMALINK_PATTERN = re.compile(r"/status/\d+[^/]*$")

ITEM_CONTAINER = 'article[data-testid="tweet"]'
ITEM_TEXT = 'div[data-testid="tweetText"]'
ITEM_USER = 'a[tabindex="-1"]'
ITEM_COUNTERS = 'span[data-testid="app-text-transition-container"]'
COUNTER_FIELDS = ("comment", "like", "share", "view")


def is_permalink(href):
    return bool(href) and PERMALINK_PATTERN.search(href) is not None


def extract_permalinks(html, base_url):
    """
    Return the unique absolute item permalinks found in <a href>, in page order.
    """
    soup = BeautifulSoup(html, 'html.parser')
    links = []
    for a in soup.find_all('a', href=True):
        href = a['href']
        if is_permalink(href):
            links.append(urljoin(base_url, href))
    # dict preserves first-seen order
    return list(dict.fromkeys(links))


def _parse_container(el):
    text = el.select_one(ITEM_TEXT)
    user = el.select_one(ITEM_USER)
    counters = el.select(ITEM_COUNTERS)

    item_text = text.get_text() if text else ""
    item_user = user.get_text() if user else ""
    if not (item_user and item_text):
        return {}

    fields = {
        "user": item_user,
        "content": item_text.replace("\n", "<br>"),
    }
    for i, name in enumerate(COUNTER_FIELDS):
        fields[name] = counters[i].get_text() if i < len(counters) else ""
    return fields


def parse_items(html):
    """
    Parse a rendered item page.
    Returns (primary_fields, secondary_users): fields of the first container
    (empty dict when there is none or it is incomplete) and the author of every
    later container, used for reply expansion.
    """
    soup = BeautifulSoup(html, 'html.parser')
    containers = soup.select(ITEM_CONTAINER)
    if not containers:
        return {}, []

    primary = _parse_container(containers[0])
    secondary_users = []
    for el in containers[1:]:
        user = el.select_one(ITEM_USER)
        name = user.get_text() if user else ""
        if name:
            secondary_users.append(name)
    return primary, secondary_users
