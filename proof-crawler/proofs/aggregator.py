from crawler.core import logger
from crawler.models import ProofCID
from proofs.storage import make_json_blob


class NoDataError(Exception):
    """Raised when a proof is requested for a round with no recorded items."""
    pass


class ProofAggregator:
    """
    Rolls every ItemCID of a round up into one proof CID.
    Invariants:
    - At most one content-addressed write per round; later calls read the stored ProofCID.
    - A minted proof is a frozen snapshot: ItemCIDs added afterwards are not folded in.
    The caller requests a round's proof only once that round's work is complete.
    """

    def __init__(self, proofs, cids, content_store):
        self.proofs = proofs
        self.cids = cids
        self.content_store = content_store

    def get_proof_cid(self, round_number: int) -> str:
        existing = self.proofs.get_item(ProofCID.key_for(round_number))
        if existing:
            logger.info(f"[PROOF] round {round_number}: returning stored proof {existing['cid']}")
            return existing["cid"]

        items = self.cids.get_list({"round": round_number})
        if not items:
            raise NoDataError(f"No cids found for round {round_number}")

        bundle = {
            "url": f"round:{round_number}",
            "round": round_number,
            "items": items,
        }
        cid = self.content_store.store(make_json_blob(bundle))

        proof = ProofCID(id=ProofCID.key_for(round_number), round=round_number, cid=cid)
        self.proofs.create(proof.to_dict())
        logger.info(f"[PROOF] round {round_number}: minted proof {cid} over {len(items)} item(s)")
        return cid
