"""
A statistical sampler for the running Python interpreter.

Each timer tick records the stack of every thread into an ArraySampler
buffer. Frames are recorded as small integer addresses, one per distinct
(code object, line) pair, so the buffer has the same shape as a native
profiler's: leaf address first, then its callers, then the sentinel.
`PythonSymbolResolver` turns those addresses back into StackFrames.
"""

import math
import random
import signal
import sys
import threading
from types import CodeType, FrameType
from typing import Any, Dict, List, Optional, Sequence, Tuple

from owntime.owntime_arguments import OwnTimeArguments
from owntime.owntime_sampler import ArraySampler, SamplerUnavailableError
from owntime.owntime_statistics import Address, Filename, LineNumber, StackFrame

FrameKey = Tuple[CodeType, int]


def _generate_exponential_sample(scale: float) -> float:
    u = random.random()  # Uniformly distributed random number between 0 and 1
    return -scale * math.log(1 - u)


def get_fully_qualified_name(code: CodeType) -> str:
    if sys.version_info >= (3, 11):
        return code.co_qualname
    return code.co_name


class PythonSymbolResolver:
    """Maps addresses handed out by a PythonSampler back to frames.

    Every recorded frame is Python bytecode (frozen modules included), so
    none is native; use a stackframe_filter to hide interpreter internals.
    """

    def __init__(self, frame_table: Dict[Address, FrameKey]) -> None:
        self.frame_table = frame_table

    def resolve(self, address: Address) -> Sequence[StackFrame]:
        code, lineno = self.frame_table[address]
        return [
            StackFrame(
                function_name=get_fully_qualified_name(code),
                filename=Filename(code.co_filename),
                line_number=LineNumber(lineno),
            )
        ]


class PythonSampler(ArraySampler):
    """Samples Python stacks on SIGPROF (CPU time).

    Not available on Windows, which has no interval timers.
    """

    def __init__(
        self,
        args: Optional[OwnTimeArguments] = None,
        all_threads: bool = True,
    ) -> None:
        if args is None:
            args = OwnTimeArguments()
        super().__init__(args.buffer_capacity)
        self.sampling_interval = args.sampling_interval
        self.all_threads = all_threads
        self._addresses: Dict[FrameKey, Address] = {}
        self._frame_table: Dict[Address, FrameKey] = {}
        self._orig_handler: Any = None
        self._running = False

    def resolver(self) -> PythonSymbolResolver:
        return PythonSymbolResolver(self._frame_table)

    def _address_of(self, frame: FrameType) -> Address:
        key = (frame.f_code, frame.f_lineno or 0)
        address = self._addresses.get(key)
        if address is None:
            # Addresses start at 1; 0 is the sentinel.
            address = Address(len(self._addresses) + 1)
            self._addresses[key] = address
            self._frame_table[address] = key
        return address

    def sample(self, frame: Optional[FrameType]) -> bool:
        """Record the stack starting at frame (the leaf)."""
        backtrace: List[Address] = []
        f = frame
        while f:
            backtrace.append(self._address_of(f))
            f = f.f_back
        if not backtrace:
            return False
        return self.record(backtrace)

    def _signal_handler(self, signum: int, this_frame: Optional[FrameType]) -> None:
        # The handler runs on the main thread; this_frame is where it was
        # interrupted.
        self.sample(this_frame)
        if self.all_threads:
            main_ident = threading.main_thread().ident
            for ident, frame in sys._current_frames().items():
                if ident != main_ident:
                    self.sample(frame)
        if self._running and not self.is_full():
            signal.setitimer(
                signal.ITIMER_PROF,
                _generate_exponential_sample(self.sampling_interval),
            )

    def start(self) -> None:
        """Install the signal handler and start the timer."""
        if sys.platform == "win32":
            raise SamplerUnavailableError("interval timers are not available on Windows")
        if self._running:
            return
        self._running = True
        self._orig_handler = signal.signal(signal.SIGPROF, self._signal_handler)
        signal.setitimer(
            signal.ITIMER_PROF,
            _generate_exponential_sample(self.sampling_interval),
        )

    def stop(self) -> None:
        """Stop the timer and restore the previous signal handler."""
        if not self._running:
            return
        self._running = False
        signal.setitimer(signal.ITIMER_PROF, 0)
        orig = self._orig_handler
        signal.signal(signal.SIGPROF, orig if orig is not None else signal.SIG_DFL)
        self._orig_handler = None

    def __enter__(self) -> "PythonSampler":
        self.start()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.stop()
