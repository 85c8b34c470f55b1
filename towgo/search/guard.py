"""Advisory "is searching" flag to skip duplicate submissions."""
from contextlib import contextmanager
from typing import Iterator


class SearchInProgress(RuntimeError):
    """Raised by `running()` when a search is already under way."""


class SearchGuard:
    """
    Boolean guard checked before starting a search.

    This is not a lock: two callers checking at the same instant can both
    get through. It only filters the common double-submit.
    """

    def __init__(self) -> None:
        self.is_searching = False

    def try_begin(self) -> bool:
        if self.is_searching:
            return False
        self.is_searching = True
        return True

    def end(self) -> None:
        self.is_searching = False

    @contextmanager
    def running(self) -> Iterator[None]:
        if not self.try_begin():
            raise SearchInProgress("A search is already in progress")
        try:
            yield
        finally:
            self.end()
