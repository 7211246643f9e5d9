"""
Fetcher Interface — Abstract Contract for Price Sources

The poller only knows this interface, never a concrete client. Tests (and
any future upstream) plug in by subclassing PriceFetcher.

Example:
    class BrsApiClient(PriceFetcher):
        name = "brsapi"

        async def fetch(self) -> PriceSample:
            ...
"""

from abc import ABC, abstractmethod
from core.schemas import PriceSample


class PriceFetcher(ABC):
    """
    Abstract Base Class for upstream price sources.

    Class Attributes:
        name: Identifier used in log lines

    Abstract Methods:
        - fetch: perform one bounded-time upstream call

    Optional Methods:
        - initialize: open sessions
        - shutdown: release sessions
    """

    name: str = "base"

    @abstractmethod
    async def fetch(self) -> PriceSample:
        """
        Retrieve one price sample.

        Returns:
            PriceSample: validated price already converted to minor units

        Raises:
            FetchError: one of UpstreamRequestError, UpstreamStatusError,
                UpstreamFormatError, UpstreamDataError
        """

    async def initialize(self) -> None:
        """Open any long-lived resources. Default: nothing to do."""

    async def shutdown(self) -> None:
        """Release long-lived resources. Default: nothing to do."""

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()
