import array
from typing import List, MutableSequence, Protocol, Sequence, cast

from owntime.owntime_config import DEFAULT_BUFFER_CAPACITY, SENTINEL_ADDRESS
from owntime.owntime_statistics import Address


class SamplerUnavailableError(RuntimeError):
    """The sampler's buffer could not be read."""


class Sampler(Protocol):
    """What OwnTime needs from a statistical sampler."""

    def current_buffer_length(self) -> int:
        ...

    def max_buffer_capacity(self) -> int:
        ...

    def copy_buffer_into(self, dst: MutableSequence[int]) -> None:
        """Fill dst with exactly current_buffer_length() addresses."""
        ...


class ArraySampler:
    """A sampler whose buffer lives in memory.

    Samples are appended with `record`; once the buffer reaches capacity
    further samples are dropped, the same way a native profiler stops
    writing when its buffer is full.
    """

    def __init__(self, capacity: int = DEFAULT_BUFFER_CAPACITY) -> None:
        assert capacity > 0
        self._capacity = capacity
        self._buffer = array.array("Q")
        self._closed = False

    def current_buffer_length(self) -> int:
        self._check_open()
        return len(self._buffer)

    def max_buffer_capacity(self) -> int:
        return self._capacity

    def copy_buffer_into(self, dst: MutableSequence[int]) -> None:
        self._check_open()
        dst[:] = self._buffer.tolist()

    def record(self, backtrace: Sequence[int]) -> bool:
        """Append one backtrace (leaf first) followed by the sentinel.

        Returns False, recording nothing, if it would not fit.
        """
        if len(self._buffer) + len(backtrace) + 1 > self._capacity:
            # Fill up what is left so the buffer reports as full.
            # The trailing partial sample has no sentinel and is ignored.
            room = self._capacity - len(self._buffer)
            self._buffer.extend(backtrace[:room])
            return False
        self._buffer.extend(backtrace)
        self._buffer.append(SENTINEL_ADDRESS)
        return True

    def load(self, addresses: Sequence[int]) -> None:
        """Replace the buffer with raw addresses (truncated to capacity)."""
        self._buffer = array.array("Q", addresses[: self._capacity])

    def is_full(self) -> bool:
        return len(self._buffer) >= self._capacity

    def clear(self) -> None:
        """Drop all recorded samples."""
        del self._buffer[:]

    def close(self) -> None:
        """Release the buffer; later reads raise SamplerUnavailableError."""
        self._closed = True
        self._buffer = array.array("Q")

    def _check_open(self) -> None:
        if self._closed:
            raise SamplerUnavailableError("sample buffer has been closed")


def read_buffer(sampler: Sampler) -> List[Address]:
    """Copy the sampler's current buffer into a new list."""
    try:
        length = sampler.current_buffer_length()
        data: List[int] = [SENTINEL_ADDRESS] * length
        sampler.copy_buffer_into(data)
    except OSError as e:
        raise SamplerUnavailableError(str(e)) from e
    return cast(List[Address], data[:length])
