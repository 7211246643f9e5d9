"""
Upstream Connectors Package

Clients for the external market data feeds the poller reads from.
Each client implements core.fetcher_interface.PriceFetcher.

Modules:
    - brsapi_client: BrsApi gold/currency feed (IR_GOLD_18K)
"""

from upstream.brsapi_client import BrsApiClient

__all__ = ["BrsApiClient"]
