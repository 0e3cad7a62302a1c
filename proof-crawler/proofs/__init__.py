from proofs.storage import ContentStore, StorageError, make_json_blob
from proofs.aggregator import ProofAggregator, NoDataError
from proofs.web3_storage import Web3StorageClient
from proofs.local_storage import LocalContentStore
