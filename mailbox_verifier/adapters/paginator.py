"""Cursor-following enumeration over a paged remote collection."""

import logging
from typing import AsyncIterator, Awaitable, Callable, List, Optional, Set, Tuple

from ..core.records import Page, RawRecord
from ..exceptions import EnumerationError

# Fetches the page behind a continuation handle; None fetches the first page
PageFetcher = Callable[[Optional[str]], Awaitable[Page]]


class Paginator:
    """
    Lazy, finite, non-restartable sequence of raw records.

    Nothing is fetched until ``advance()`` is called (directly or by
    iterating). Each call follows the previous page's continuation handle;
    the sequence ends on the first page that has none.

    A failed fetch raises EnumerationError and ends the sequence. Whatever
    was returned before the failure is left to the caller to keep or discard.
    """

    def __init__(self, fetch_page: PageFetcher, label: str = ""):
        self._fetch_page = fetch_page
        self._handle: Optional[str] = None
        self._followed: Set[str] = set()
        self._done = False
        self.label = label
        self.pages_fetched = 0
        self.items_yielded = 0
        self.logger = logging.getLogger(__name__)

    @property
    def done(self) -> bool:
        return self._done

    async def advance(self) -> Tuple[List[RawRecord], bool]:
        """
        Fetch the next page.

        Returns:
            (batch, done): the page's records in page order, and whether
            this was the last page. Once done, returns ([], True).

        Raises:
            EnumerationError: If the fetch fails or the response is unusable
        """
        if self._done:
            return [], True

        handle = self._handle
        page_number = self.pages_fetched + 1
        try:
            page = await self._fetch_page(handle)
        except Exception as e:
            self._done = True
            self.logger.error(f"Failed to fetch {self.label} page {page_number}: {e}")
            raise EnumerationError(
                f"Failed to fetch {self.label} page {page_number}: {e}",
                pages_fetched=self.pages_fetched,
            ) from e

        if not isinstance(page, Page):
            self._done = True
            raise EnumerationError(
                f"Malformed {self.label} page {page_number}: {type(page).__name__}",
                pages_fetched=self.pages_fetched,
            )

        self.pages_fetched += 1

        if handle:
            self._followed.add(handle)

        # A handle seen before would loop forever, directly or through a cycle
        if page.next_handle and page.next_handle in self._followed:
            self._done = True
            raise EnumerationError(
                f"Continuation handle {page.next_handle!r} did not advance on {self.label} page {page_number}",
                pages_fetched=self.pages_fetched,
            )

        self._handle = page.next_handle
        self._done = not page.has_next
        self.items_yielded += len(page.items)

        self.logger.debug(
            f"Fetched {self.label} page {page_number}: {len(page.items)} item(s), "
            f"{'last page' if self._done else 'more pages'}"
        )
        return list(page.items), self._done

    async def pages(self) -> AsyncIterator[List[RawRecord]]:
        """Yield batches until the last page."""
        while not self._done:
            batch, _ = await self.advance()
            yield batch

    def __aiter__(self) -> AsyncIterator[RawRecord]:
        return self._records()

    async def _records(self) -> AsyncIterator[RawRecord]:
        async for batch in self.pages():
            for record in batch:
                yield record
