"""
Session management for the authenticated crawl.
Owns login state and the negotiation back-off floor.
"""

import time
from playwright.sync_api import Error as PlaywrightError
from crawler.core import (
    LOGIN_URL,
    LOGIN_SETTLE_TIME,
    PLATFORM_HOME,
    SESSION_CHECK_INTERVAL,
    VERIFY_CHALLENGE_TIMEOUT,
    VIEWPORT_HEIGHT,
    VIEWPORT_WIDTH,
    logger
)
from crawler.js_engine import BrowserHandle
from crawler.models import Session

USERNAME_INPUT = 'input[autocomplete="username"]'
VERIFY_INPUT = 'input[data-testid="ocfEnterTextTextInput"]'
PASSWORD_INPUT = 'input[name="password"]'


class SessionError(Exception):
    """Login flow element missing or login did not settle."""
    pass


class SessionNotReady(SessionError):
    """Raised while the back-off floor since the last attempt has not elapsed."""

    def __init__(self, retry_in: float):
        super().__init__(f"session negotiation backing off for {retry_in:.1f}s")
        self.retry_in = retry_in


class SessionManager:
    """
    FLOW: ensure_session() -> returns the live Session if marked valid ->
    otherwise negotiates (launch browser, open page, log in) at most once per
    SESSION_CHECK_INTERVAL -> raises SessionError when the login cannot complete.
    """

    def __init__(self, credentials, browser_factory=BrowserHandle, clock=time.monotonic,
                 check_interval=SESSION_CHECK_INTERVAL):
        self.credentials = credentials
        self._browser_factory = browser_factory
        self._clock = clock
        self._check_interval = check_interval
        self.session = Session()

    def ensure_session(self) -> Session:
        if self.session.valid:
            return self.session

        last = self.session.last_check
        if last is not None:
            elapsed = self._clock() - last
            if elapsed < self._check_interval:
                raise SessionNotReady(self._check_interval - elapsed)

        self._negotiate()
        return self.session

    def invalidate(self):
        """Marks the session expired; the next ensure_session() renegotiates."""
        if self.session.valid:
            logger.warning("[SESSION] Session invalidated.")
        self.session.valid = False

    def close(self):
        browser = self.session.browser
        self.session = Session(last_check=self.session.last_check)
        if browser is not None:
            browser.close()
            logger.info("[SESSION] Browser closed.")

    def _negotiate(self):
        # Stamp before the attempt so failures also respect the floor
        self.close()
        self.session.last_check = self._clock()
        logger.info("[SESSION] Negotiating new session.")

        try:
            browser = self._browser_factory().launch()
            self.session.browser = browser
            page = browser.new_page()
            self.session.page = page
            page.set_viewport(VIEWPORT_WIDTH, VIEWPORT_HEIGHT)
            self._login(page)
        except PlaywrightError as e:
            self.close()
            raise SessionError(f"login flow failed: {e}") from e
        except SessionError:
            self.close()
            raise

        self.session.valid = True
        self.session.last_check = self._clock()
        logger.info("[SESSION] Login successful.")

    def _login(self, page):
        logger.info("[SESSION] Step: Go to platform home")
        page.navigate(PLATFORM_HOME)

        logger.info("[SESSION] Step: Go to login page")
        page.navigate(LOGIN_URL)

        logger.info("[SESSION] Step: Fill in username")
        page.wait_for_selector(USERNAME_INPUT)
        page.type(USERNAME_INPUT, self.credentials["username"])
        page.press_key("Enter")

        if self._has_verify_challenge(page):
            logger.info("[SESSION] Step: Confirm username challenge")
            page.type(VERIFY_INPUT, self.credentials["username"])
            page.press_key("Enter")

        logger.info("[SESSION] Step: Fill in password")
        page.wait_for_selector(PASSWORD_INPUT)
        page.type(PASSWORD_INPUT, self.credentials["password"])
        page.press_key("Enter")

        page.wait_until_stable(LOGIN_SETTLE_TIME)
        if page.is_visible(PASSWORD_INPUT):
            raise SessionError("login did not settle: password prompt still visible")

    @staticmethod
    def _has_verify_challenge(page) -> bool:
        try:
            page.wait_for_selector(VERIFY_INPUT, timeout=VERIFY_CHALLENGE_TIMEOUT, visible=True)
        except PlaywrightError:
            return False
        return True
