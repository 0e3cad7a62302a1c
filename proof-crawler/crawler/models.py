from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Session:
    """
    Authenticated browser session.
    Owned by exactly one SessionManager; never persisted across restarts.
    """
    browser: Any = None
    page: Any = None
    valid: bool = False
    last_check: Optional[float] = None


@dataclass(frozen=True)
class Record:
    """
    Structured harvest of one item page.
    Invariant: url is the primary key; an empty `fields` means nothing usable was found.
    """
    url: str
    round: int = 0
    fields: Dict[str, str] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.fields

    def to_dict(self) -> Dict[str, Any]:
        d = dict(self.fields)
        d["url"] = self.url
        d["round"] = self.round
        return d


@dataclass(frozen=True)
class ItemCID:
    id: str
    round: int
    cid: str

    @property
    def key(self) -> str:
        # One row per (round, url) so a later round never moves an earlier anchor
        return f"{self.round}:{self.id}"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "round": self.round, "cid": self.cid}


@dataclass(frozen=True)
class ProofCID:
    """
    Aggregated proof for one round. At most one per round, frozen once minted.
    """
    id: str
    round: int
    cid: str

    @staticmethod
    def key_for(round_number: int) -> str:
        return f"proof:{round_number}"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "round": self.round, "cid": self.cid}


@dataclass
class CrawlQuery:
    """
    Input for one crawl invocation.
    `query` is the seed URL; `search_term` feeds reply expansion when `is_recursive`;
    `recursive` enables link discovery from every visited item.
    """
    query: str
    search_term: str = ""
    limit: int = 100
    is_recursive: bool = False
    recursive: bool = False
    round_provider: Any = None
