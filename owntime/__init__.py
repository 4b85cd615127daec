"""Own-time and total-time breakdowns of statistical profiler samples."""

from owntime.owntime_aggregate import accept_all, file_contains, own_time, total_time
from owntime.owntime_arguments import OwnTimeArguments
from owntime.owntime_buffer import ProfileBufferFullWarning, split_backtraces
from owntime.owntime_cache import ResultCache
from owntime.owntime_config import owntime_version as __version__
from owntime.owntime_profiler import OwnTime
from owntime.owntime_resolver import (
    MappingSymbolResolver,
    SymbolResolutionError,
    resolve_stacktraces,
)
from owntime.owntime_sampler import ArraySampler, SamplerUnavailableError
from owntime.owntime_statistics import FrameCounts, StackFrame

# Short names, matching the operations of the same name on OwnTime.
filecontains = file_contains

__all__ = [
    "ArraySampler",
    "FrameCounts",
    "MappingSymbolResolver",
    "OwnTime",
    "OwnTimeArguments",
    "ProfileBufferFullWarning",
    "ResultCache",
    "SamplerUnavailableError",
    "StackFrame",
    "SymbolResolutionError",
    "accept_all",
    "file_contains",
    "filecontains",
    "own_time",
    "resolve_stacktraces",
    "split_backtraces",
    "total_time",
]
