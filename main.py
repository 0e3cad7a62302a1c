"""
Entry point for the round proof crawler.
Runs a crawl task, mints or fetches round proofs, and audits submissions.
"""

import sys
import os
import argparse
from urllib.parse import quote

# Make the proof-crawler packages (crawler, proofs, rounds) importable from a checkout
sys.path.append(os.path.join(os.path.dirname(__file__), "proof-crawler"))

from crawler.core import CRAWL_LIMIT, PLATFORM_HOME, SEARCH_TERM, logger
from crawler.models import CrawlQuery
from crawler.session import SessionError
from proofs.aggregator import NoDataError
from proofs.storage import StorageError
from rounds.task import build_content_store, build_task


def search_url(term):
    return f"{PLATFORM_HOME}/search?q={quote(term)}&src=typed_query"


def cmd_crawl(task, args):
    query = CrawlQuery(
        query=args.seed or search_url(args.term),
        search_term=args.term,
        limit=args.limit,
        is_recursive=args.expand_replies,
        recursive=args.recursive,
    )
    task.start(query)
    try:
        task.join()
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping crawler after the current item...")
        task.stop()
    return 0


def cmd_proof(task, args):
    print(task.aggregator.get_proof_cid(args.round))
    return 0


def cmd_submission(task, args):
    print(task.fetch_submission())
    return 0


def cmd_audit(task, args):
    valid = task.audit_submission(args.cid, args.round)
    print("valid" if valid else "invalid")
    return 0 if valid else 1


def main(argv=None):
    parser = argparse.ArgumentParser(description="Authenticated crawler with per-round content-addressed proofs")
    parser.add_argument("--store", choices=["web3", "local"], default=None, help="Content store backend")
    sub = parser.add_subparsers(dest="cmd", required=True)

    crawl = sub.add_parser("crawl", help="Crawl items and anchor them under the current round")
    crawl.add_argument("--term", default=SEARCH_TERM, help="Search term used for the seed and reply expansion")
    crawl.add_argument("--seed", default=None, help="Explicit seed URL (defaults to a search for --term)")
    crawl.add_argument("--limit", type=int, default=CRAWL_LIMIT, help="Number of items to anchor")
    crawl.add_argument("--recursive", action="store_true", help="Discover links from every visited item")
    crawl.add_argument("--expand-replies", action="store_true", help="Search the authors of replies")

    proof = sub.add_parser("proof", help="Mint or fetch the proof CID of a round")
    proof.add_argument("round", type=int)

    sub.add_parser("submission", help="Proof CID of the previous round")

    audit = sub.add_parser("audit", help="Re-validate a submitted proof CID")
    audit.add_argument("cid")
    audit.add_argument("round", type=int)

    args = parser.parse_args(argv)
    content_store = build_content_store(args.store) if args.store else None
    task = build_task(content_store=content_store)

    handlers = {
        "crawl": cmd_crawl,
        "proof": cmd_proof,
        "submission": cmd_submission,
        "audit": cmd_audit,
    }
    try:
        return handlers[args.cmd](task, args)
    except (NoDataError, StorageError) as e:
        logger.error(f"{args.cmd} failed: {e}")
        return 2
    except SessionError as e:
        logger.error(f"{args.cmd} failed, no usable session: {e}")
        return 3


if __name__ == "__main__":
    raise SystemExit(main())
