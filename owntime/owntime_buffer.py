"""
Reading the raw sample buffer and splitting it into backtraces.

The buffer is a flat sequence of addresses. Each sample is written leaf
frame first and terminated by SENTINEL_ADDRESS.
"""

import warnings
from typing import List, Optional, Tuple

from owntime.owntime_config import SENTINEL_ADDRESS
from owntime.owntime_sampler import Sampler, read_buffer
from owntime.owntime_statistics import Backtrace, RawBuffer


class ProfileBufferFullWarning(RuntimeWarning):
    """The sample buffer filled up; later samples were not recorded."""


FULL_BUFFER_MESSAGE = (
    "The profile data buffer is full; profiling probably terminated "
    "before your program finished. To profile for longer runs, use a "
    "larger buffer capacity and/or a larger sampling interval."
)


class SampleBufferReader:
    """Reads the sampler's buffer and remembers the last one read."""

    def __init__(self, sampler: Sampler) -> None:
        self.sampler = sampler
        self.last_fetched: Optional[RawBuffer] = None

    def fetch(self) -> Tuple[RawBuffer, bool, bool]:
        """Return (addresses, is_buffer_full, is_new_data).

        Every call replaces the remembered buffer, so a later call only
        reports new data if the sampler has changed since this one.
        """
        data = read_buffer(self.sampler)
        is_full = len(data) == self.sampler.max_buffer_capacity()
        is_new = data != self.last_fetched
        self.last_fetched = data
        return data, is_full, is_new

    def clear(self) -> None:
        self.last_fetched = None


def warn_full_buffer(stacklevel: int) -> None:
    """Warn that samples may be missing.

    `stacklevel` is counted from this function, as for `warnings.warn`, and
    should point at the caller of the public entry point.
    """
    warnings.warn(FULL_BUFFER_MESSAGE, ProfileBufferFullWarning, stacklevel=stacklevel)


def split_backtraces(buffer: RawBuffer) -> List[Backtrace]:
    """Split a raw buffer at each sentinel, dropping empty backtraces.

    Addresses after the last sentinel belong to an incomplete sample and
    are discarded.
    """
    bts: List[Backtrace] = []
    i = 0
    for j, address in enumerate(buffer):
        if address == SENTINEL_ADDRESS:
            bts.append(buffer[i:j])
            i = j + 1
    return [bt for bt in bts if bt]
