"""
FILE DESCRIPTION: Foundational module for global configuration and logging.
KEY FUNCTIONS/CLASSES: setup_logger, CompanyFormatter, configuration constants
"""

import logging
import sys
import os
from datetime import datetime, timezone
from pathlib import Path
from dotenv import load_dotenv

# === CONFIGURATION SECTION ===

# Load .env from the repository root
load_dotenv(Path(__file__).resolve().parents[2] / '.env')


def _env_bool(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Platform credentials (never logged)
TWITTER_USERNAME = os.getenv("TWITTER_USERNAME", "")
TWITTER_PASSWORD = os.getenv("TWITTER_PASSWORD", "")

# Platform endpoints
PLATFORM_HOME = os.getenv("PLATFORM_HOME", "https://twitter.com").rstrip("/")
LOGIN_URL = os.getenv("LOGIN_URL", f"{PLATFORM_HOME}/i/flow/login")

# canonical data directory for the crawler
DATA_DIR = Path(os.getenv("DATA_DIR", Path(__file__).resolve().parents[1] / 'data'))

# Browser parameters
HEADLESS = _env_bool("HEADLESS", True)
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36"
VIEWPORT_WIDTH = 1920
VIEWPORT_HEIGHT = 1000
EXTENDED_VIEWPORT_HEIGHT = 10000

# Playwright / JS Rendering Waiting Periods (seconds)
JS_GOTO_TIMEOUT = int(os.getenv("JS_GOTO_TIMEOUT", 30))
PRE_NAVIGATION_DELAY = float(os.getenv("PRE_NAVIGATION_DELAY", 1))
DISCOVERY_SETTLE_TIME = float(os.getenv("DISCOVERY_SETTLE_TIME", 5))
EXTRACTION_SETTLE_TIME = float(os.getenv("EXTRACTION_SETTLE_TIME", 2))
VERIFY_CHALLENGE_TIMEOUT = float(os.getenv("VERIFY_CHALLENGE_TIMEOUT", 5))
LOGIN_SETTLE_TIME = float(os.getenv("LOGIN_SETTLE_TIME", 1))

# Minimum gap between two session negotiation attempts (seconds)
SESSION_CHECK_INTERVAL = float(os.getenv("SESSION_CHECK_INTERVAL", 60))

# Content-addressed storage
CONTENT_STORE = os.getenv("CONTENT_STORE", "web3")
WEB3STORAGE_TOKEN = os.getenv("WEB3STORAGE_TOKEN", "")
WEB3STORAGE_API = os.getenv("WEB3STORAGE_API", "https://api.web3.storage").rstrip("/")
IPFS_GATEWAY = os.getenv("IPFS_GATEWAY", "https://w3s.link/ipfs").rstrip("/")
STORAGE_TIMEOUT = int(os.getenv("STORAGE_TIMEOUT", 60))

# Rounds (standalone clock provider)
ROUND_LENGTH_SECONDS = int(os.getenv("ROUND_LENGTH_SECONDS", 600))
ROUND_GENESIS = float(os.getenv("ROUND_GENESIS", 0))

# Crawl defaults
SEARCH_TERM = os.getenv("SEARCH_TERM", "web3")
CRAWL_LIMIT = int(os.getenv("CRAWL_LIMIT", 100))
AUDIT_SAMPLE_SIZE = int(os.getenv("AUDIT_SAMPLE_SIZE", 5))

LOG_FILE = os.getenv("LOG_FILE")


# === LOGGING SECTION ===

class CompanyFormatter(logging.Formatter):
    """
    FLOW: Receives a log record -> Extracts timestamp -> Formats according to company standard
    (e.g., [ Tue Jan 06 05:32:41 AM UTC 2026 ]) -> Prepends level and context -> Returns final string.
    """
    def format(self, record):
        dt = datetime.fromtimestamp(record.created, timezone.utc)
        timestamp = dt.strftime("%a %b %d %I:%M:%S %p UTC %Y")
        context = getattr(record, 'context', 'root')
        message = f"[ {timestamp} ] : {record.levelname} : {context} : {record.getMessage()}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message

def setup_logger(name="crawler", log_file=None, level=logging.INFO):
    """
    FLOW: Initializes/Retrieves logger -> Checks for existing handlers to prevent duplicates ->
    Sets propagation for child loggers -> Attaches Console and optional File handlers with CompanyFormatter.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    if name != "crawler":
        logger.propagate = True
        setup_logger("crawler", log_file=log_file, level=level)
        return logger

    formatter = CompanyFormatter()

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler (optional)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger

# Global logger instance
logger = setup_logger(log_file=LOG_FILE)
