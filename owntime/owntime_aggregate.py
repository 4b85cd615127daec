"""
Own-time and total-time aggregation of stack traces.

Own time charges each sample to the frame that was executing (the leaf);
total time charges it to every frame on the stack, once per sample even
under recursion.
"""

from collections import defaultdict
from operator import itemgetter
from typing import Callable, Dict, Iterable, List, Sequence

from owntime.owntime_config import LEAF_FRAME_INDEX
from owntime.owntime_statistics import FrameCounts, StackFrame, StackTrace

StackFrameFilter = Callable[[StackFrame], bool]


def accept_all(stackframe: StackFrame) -> bool:
    """Default filter: keep every frame."""
    return True


def file_contains(needle: str) -> StackFrameFilter:
    """A filter that keeps frames whose file path contains `needle`."""

    def contains(stackframe: StackFrame) -> bool:
        return needle in str(stackframe.filename)

    return contains


def count_frames(frames: Iterable[StackFrame], total: int) -> FrameCounts:
    """Count frame occurrences and sort by count, highest first.

    `sorted` is stable, so frames with equal counts keep the order in
    which they were first seen.
    """
    counts: Dict[StackFrame, int] = defaultdict(int)
    for frame in frames:
        counts[frame] += 1
    return FrameCounts(sorted(counts.items(), key=itemgetter(1), reverse=True), total)


def filter_stacktraces(
    stacktraces: Sequence[StackTrace], stackframe_filter: StackFrameFilter
) -> List[StackTrace]:
    return [
        [frame for frame in stackframes if stackframe_filter(frame)]
        for stackframes in stacktraces
    ]


def own_time(
    stacktraces: Sequence[StackTrace],
    stackframe_filter: StackFrameFilter = accept_all,
) -> FrameCounts:
    """Count the samples spent in each frame *excluding* its sub-calls.

    Traces left empty by the filter contribute nothing but still count
    towards `total`.
    """
    filtered = filter_stacktraces(stacktraces, stackframe_filter)
    leaves = (stackframes[LEAF_FRAME_INDEX] for stackframes in filtered if stackframes)
    return count_frames(leaves, len(stacktraces))


def total_time(
    stacktraces: Sequence[StackTrace],
    stackframe_filter: StackFrameFilter = accept_all,
) -> FrameCounts:
    """Count the samples spent in each frame *including* its sub-calls."""
    filtered = filter_stacktraces(stacktraces, stackframe_filter)
    # dict.fromkeys drops recursive repeats but keeps first-seen order.
    return count_frames(
        (frame for stackframes in filtered for frame in dict.fromkeys(stackframes)),
        len(stacktraces),
    )
