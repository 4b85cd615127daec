from typing import List, Optional

from owntime.owntime_statistics import RawBuffer, StackTrace


class ResultCache:
    """The last raw buffer and the stack traces resolved from it.

    Both fields change together: `stacktraces` is always the resolution
    of `buffer`. Not thread-safe; callers sharing a cache across threads
    must serialize access themselves.
    """

    def __init__(self) -> None:
        self.buffer: Optional[RawBuffer] = None
        self.stacktraces: Optional[List[StackTrace]] = None

    def get(self, buffer: RawBuffer) -> Optional[List[StackTrace]]:
        """The cached stack traces, if they were resolved from this buffer."""
        if self.stacktraces is None or self.buffer != buffer:
            return None
        return self.stacktraces

    def store(self, buffer: RawBuffer, stacktraces: List[StackTrace]) -> None:
        self.buffer = list(buffer)
        self.stacktraces = stacktraces

    def invalidate(self, buffer: Optional[RawBuffer] = None) -> bool:
        """Clear the cache unless it holds exactly `buffer`.

        Returns True if anything was dropped.
        """
        if self.buffer is None:
            return False
        if buffer is not None and buffer == self.buffer:
            return False
        self.clear()
        return True

    def clear(self) -> None:
        """Reset both fields."""
        self.buffer = None
        self.stacktraces = None

    def __bool__(self) -> bool:
        return self.stacktraces is not None
