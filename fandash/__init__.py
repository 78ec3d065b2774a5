"""
Fandash — fan dashboard aggregation core.

    from fandash import open_session
    async with open_session() as orchestrator:
        result = await orchestrator.run_pass()
"""

from .config import Settings
from .orchestrator import AggregationOrchestrator, AggregationPass, build_summary, open_session

__all__ = ["Settings", "AggregationOrchestrator", "AggregationPass", "build_summary", "open_session"]
