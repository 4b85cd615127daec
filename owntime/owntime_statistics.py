from __future__ import annotations

from typing import (
    Any,
    Iterator,
    List,
    NewType,
    Tuple,
    overload,
)

from pydantic import PositiveInt

Address = NewType("Address", int)
Filename = NewType("Filename", str)
LineNumber = NewType("LineNumber", PositiveInt)

# One profiler fetch: addresses with a sentinel after each sample.
RawBuffer = List[Address]

# One sample's addresses, leaf first, without the sentinel.
Backtrace = List[Address]


class StackFrame:
    """Represents a single resolved frame in the stack."""

    __slots__ = ("function_name", "filename", "line_number", "is_native")

    def __init__(
        self,
        function_name: str,
        filename: Filename,
        line_number: LineNumber,
        is_native: bool = False,
    ) -> None:
        self.function_name = function_name
        self.filename = filename
        self.line_number = line_number
        self.is_native = is_native

    def __repr__(self) -> str:
        native = " [native]" if self.is_native else ""
        return f"{self.function_name} at {self.filename}:{self.line_number}{native}"

    def __hash__(self) -> int:
        return hash(
            (self.function_name, self.filename, self.line_number, self.is_native)
        )

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, StackFrame):
            return False
        return (self.function_name == other.function_name and
                self.filename == other.filename and
                self.line_number == other.line_number and
                self.is_native == other.is_native)


# A backtrace after symbol resolution and removal of native frames.
StackTrace = List[StackFrame]


class FrameCounts:
    """Sample counts per frame, sorted by count (highest first).

    `total` is the number of stack traces that were aggregated, which is
    the denominator for percentages. It can exceed the sum of the counts
    when a filter removed frames.
    """

    def __init__(self, counts: List[Tuple[StackFrame, int]], total: int) -> None:
        self.counts = counts
        self.total = total

    def frames(self) -> List[StackFrame]:
        """The frames, in count order."""
        return [frame for frame, _ in self.counts]

    @overload
    def __getitem__(self, i: int) -> Tuple[StackFrame, int]: ...

    @overload
    def __getitem__(self, i: slice) -> List[Tuple[StackFrame, int]]: ...

    def __getitem__(self, i: Any) -> Any:
        return self.counts[i]

    def __iter__(self) -> Iterator[Tuple[StackFrame, int]]:
        return iter(self.counts)

    def __len__(self) -> int:
        return len(self.counts)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, FrameCounts):
            return NotImplemented
        return self.counts == other.counts and self.total == other.total

    def __repr__(self) -> str:
        return f"FrameCounts({len(self.counts)} frames, total={self.total})"

    def __str__(self) -> str:
        from owntime.owntime_output import OwnTimeOutput

        return OwnTimeOutput().format_frame_counts(self)

    def percentages(
        self, threshold: float = 1
    ) -> Iterator[Tuple[int, int, StackFrame, int]]:
        """Yield (rank, percent, frame, count), skipping entries below threshold.

        Ranks are 1-based positions in the full sorted list, so suppressed
        entries leave gaps.
        """
        if not self.total:
            return
        for rank, (frame, count) in enumerate(self.counts, start=1):
            percent = round(100 * count / self.total)
            if percent >= threshold:
                yield rank, percent, frame, count
