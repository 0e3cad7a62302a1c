from crawler.storage.data_store import DataStore
