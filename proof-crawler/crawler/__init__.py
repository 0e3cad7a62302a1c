from crawler.models import Session, Record, ItemCID, ProofCID, CrawlQuery
from crawler.session import SessionManager, SessionError, SessionNotReady
from crawler.engine import FrontierCrawler
from crawler.frontier import Frontier
