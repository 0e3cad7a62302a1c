"""
FILE DESCRIPTION: Headless browser operations for authenticated rendering.
KEY FUNCTIONS/CLASSES: BrowserHandle, PageClient

Playwright sync objects are bound to the thread that started them; a
BrowserHandle must be launched, used and closed from one thread.
"""

from playwright.sync_api import sync_playwright
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from crawler.core import (
    HEADLESS,
    JS_GOTO_TIMEOUT,
    USER_AGENT,
    VIEWPORT_WIDTH,
    VIEWPORT_HEIGHT,
    logger
)


class PageClient:
    """
    FLOW: Wraps one Playwright page -> Exposes navigation, bounded waits, typing and
    rendered-HTML extraction with timeouts expressed in seconds.
    """

    def __init__(self, page):
        self._page = page

    @property
    def current_url(self) -> str:
        return self._page.url

    def set_viewport(self, width: int, height: int):
        self._page.set_viewport_size({"width": width, "height": height})

    def navigate(self, url: str, timeout: float = JS_GOTO_TIMEOUT):
        self._page.goto(url, wait_until="domcontentloaded", timeout=timeout * 1000)

    def wait(self, seconds: float):
        if seconds > 0:
            self._page.wait_for_timeout(seconds * 1000)

    def wait_for_selector(self, selector: str, timeout: float = JS_GOTO_TIMEOUT, visible: bool = False):
        state = "visible" if visible else "attached"
        self._page.wait_for_selector(selector, state=state, timeout=timeout * 1000)

    def wait_until_stable(self, max_wait: float):
        """Bounded settle: returns after the network goes idle or max_wait elapses."""
        try:
            self._page.wait_for_load_state("networkidle", timeout=max_wait * 1000)
        except PlaywrightTimeoutError:
            pass

    def is_visible(self, selector: str) -> bool:
        return self._page.is_visible(selector)

    def type(self, selector: str, text: str):
        self._page.type(selector, text)

    def press_key(self, key: str):
        self._page.keyboard.press(key)

    def content(self) -> str:
        return self._page.content()


class BrowserHandle:
    """
    FLOW: Starts Playwright -> Launches Chromium -> Creates an isolated context ->
    Hands out PageClient instances -> Tears everything down on close().
    """

    def __init__(self, headless: bool = HEADLESS):
        self.headless = headless
        self._playwright = None
        self._browser = None
        self._context = None

    def launch(self):
        self._playwright = sync_playwright().start()
        try:
            self._browser = self._playwright.chromium.launch(
                headless=self.headless,
                args=["--disable-gpu", "--no-sandbox", "--disable-dev-shm-usage"]
            )
            self._context = self._browser.new_context(
                user_agent=USER_AGENT,
                viewport={"width": VIEWPORT_WIDTH, "height": VIEWPORT_HEIGHT}
            )
        except PlaywrightError:
            self.close()
            raise
        logger.info("[JS-ENGINE] Browser launched.")
        return self

    def new_page(self) -> PageClient:
        return PageClient(self._context.new_page())

    def close(self):
        try:
            if self._browser is not None:
                self._browser.close()
        except PlaywrightError as e:
            logger.warning(f"[JS-ENGINE] Browser close failed: {e}")
        finally:
            self._browser = None
            self._context = None
            if self._playwright is not None:
                self._playwright.stop()
                self._playwright = None
