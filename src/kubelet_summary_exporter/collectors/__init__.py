from .ephemeral_storage_collector import EphemeralStorageCollector, ErrorTally
from .summary_fetcher import SummaryFetcher

__all__ = ["EphemeralStorageCollector", "ErrorTally", "SummaryFetcher"]
