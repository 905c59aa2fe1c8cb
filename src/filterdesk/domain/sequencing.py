"""Request tokens for last-selection-wins fetches."""

import itertools


class RequestSequencer:
    """Issues monotonically increasing tokens for fetches of one kind.

    Only the most recently issued token is current. A fetch that completes
    with an older token has been superseded and its response must be dropped.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._latest = 0

    def issue(self) -> int:
        """Start a new fetch, superseding all earlier ones."""
        self._latest = next(self._counter)
        return self._latest

    def is_current(self, token: int) -> bool:
        return token == self._latest

    @property
    def latest(self) -> int:
        return self._latest
