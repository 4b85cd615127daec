"""
The OwnTime pipeline: fetch the sample buffer, split it into backtraces,
resolve them to stack traces (cached), and aggregate own and total time.

Not thread-safe: an OwnTime instance and its ResultCache must only be used
from one thread at a time.
"""

from typing import List, Optional, Sequence, Tuple

from owntime.owntime_aggregate import (
    StackFrameFilter,
    accept_all,
    own_time,
    total_time,
)
from owntime.owntime_arguments import OwnTimeArguments
from owntime.owntime_buffer import SampleBufferReader, split_backtraces, warn_full_buffer
from owntime.owntime_cache import ResultCache
from owntime.owntime_resolver import SymbolResolver, resolve_stacktraces
from owntime.owntime_sampler import Sampler
from owntime.owntime_statistics import Backtrace, FrameCounts, RawBuffer, StackTrace


class OwnTime:
    """Own-time and total-time views of a sampler's buffer."""

    def __init__(
        self,
        sampler: Sampler,
        resolver: SymbolResolver,
        cache: Optional[ResultCache] = None,
        args: Optional[OwnTimeArguments] = None,
    ) -> None:
        self.reader = SampleBufferReader(sampler)
        self.resolver = resolver
        self.cache = cache if cache is not None else ResultCache()
        self.args = args if args is not None else OwnTimeArguments()

    def _warn_on_full_buffer(self, warn_on_full_buffer: Optional[bool]) -> bool:
        if warn_on_full_buffer is None:
            return bool(self.args.warn_on_full_buffer)
        return warn_on_full_buffer

    def clear(self) -> None:
        """Empty the result cache, forcing the next call to resolve again."""
        self.cache.clear()
        self.reader.clear()

    def fetch(self) -> Tuple[RawBuffer, bool, bool]:
        """Return (addresses, is_buffer_full, is_new_data).

        Mostly for internal use. Note that this updates the "last fetched"
        buffer, so a following `stacktraces()` sees no new data.
        """
        return self.reader.fetch()

    # Warnings are attributed to whoever called the public method:
    # warn_full_buffer <- _fetch_checked <- backtraces <- caller, or
    # warn_full_buffer <- _fetch_checked <- _stacktraces <- public method <- caller.
    def _fetch_checked(
        self, warn_on_full_buffer: Optional[bool], stacklevel: int
    ) -> Tuple[RawBuffer, bool]:
        buffer, full_buffer, new_data = self.reader.fetch()
        if self._warn_on_full_buffer(warn_on_full_buffer) and full_buffer:
            warn_full_buffer(stacklevel)
        return buffer, new_data

    def _stacktraces(self, warn_on_full_buffer: Optional[bool]) -> List[StackTrace]:
        """Only call this directly from a public method."""
        buffer, new_data = self._fetch_checked(warn_on_full_buffer, stacklevel=5)
        if not new_data:
            cached = self.cache.get(buffer)
            if cached is not None:
                return cached
        sts = resolve_stacktraces(split_backtraces(buffer), self.resolver)
        self.cache.store(buffer, sts)
        return sts

    def backtraces(self, warn_on_full_buffer: Optional[bool] = None) -> List[Backtrace]:
        """Return the backtraces (lists of addresses) in the sampler's buffer."""
        buffer, _ = self._fetch_checked(warn_on_full_buffer, stacklevel=4)
        return split_backtraces(buffer)

    def stacktraces(self, warn_on_full_buffer: Optional[bool] = None) -> List[StackTrace]:
        """Return the resolved stack traces, reusing the cached result when
        the buffer has not changed.

        Resolution may take a long time for a large buffer.
        """
        return self._stacktraces(warn_on_full_buffer)

    def owntime(
        self,
        stacktraces: Optional[Sequence[StackTrace]] = None,
        stackframe_filter: StackFrameFilter = accept_all,
        warn_on_full_buffer: Optional[bool] = None,
    ) -> FrameCounts:
        """Count the time spent on each frame *excluding* its sub-calls.

        `stackframe_filter` takes a StackFrame and returns True if it should
        be included in the counts. For more advanced filtering, preprocess
        the result of `stacktraces()` and pass it in.
        """
        if stacktraces is None:
            stacktraces = self._stacktraces(warn_on_full_buffer)
        return own_time(stacktraces, stackframe_filter)

    def totaltime(
        self,
        stacktraces: Optional[Sequence[StackTrace]] = None,
        stackframe_filter: StackFrameFilter = accept_all,
        warn_on_full_buffer: Optional[bool] = None,
    ) -> FrameCounts:
        """Count the time spent on each frame *including* its sub-calls."""
        if stacktraces is None:
            stacktraces = self._stacktraces(warn_on_full_buffer)
        return total_time(stacktraces, stackframe_filter)
