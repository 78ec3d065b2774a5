from .aggregator import AggregationOrchestrator, AggregationPass, open_session
from .categories import CATEGORY_FETCHERS, Sources
from .dashboard import build_summary, latest_activity

__all__ = [
    "AggregationOrchestrator", "AggregationPass", "open_session",
    "CATEGORY_FETCHERS", "Sources", "build_summary", "latest_activity",
]
