import warnings

import pytest
from unittest.mock import MagicMock

from owntime import OwnTime, filecontains
from owntime.owntime_arguments import OwnTimeArguments
from owntime.owntime_buffer import ProfileBufferFullWarning
from owntime.owntime_cache import ResultCache
from owntime.owntime_resolver import MappingSymbolResolver, SymbolResolutionError
from owntime.owntime_sampler import ArraySampler
from owntime.owntime_statistics import StackFrame

MAIN = StackFrame("main", "/app/main.py", 3)
WORK = StackFrame("work", "/app/work.py", 10)
LOOP = StackFrame("loop", "/app/work.py", 20)
NATIVE = StackFrame("pthread_start", "libpthread.so", 0, is_native=True)

SYMBOLS = {
    1: [WORK],
    2: [MAIN],
    3: [NATIVE],
    4: [LOOP],
}


@pytest.fixture
def sampler():
    s = ArraySampler(capacity=1000)
    s.record([1, 2, 3])
    s.record([4, 1, 2, 3])
    s.record([4, 4, 2, 3])
    return s


@pytest.fixture
def resolver():
    return MagicMock(wraps=MappingSymbolResolver(SYMBOLS))


def test_backtraces(sampler, resolver):
    ot = OwnTime(sampler, resolver)
    assert ot.backtraces() == [[1, 2, 3], [4, 1, 2, 3], [4, 4, 2, 3]]


def test_stacktraces(sampler, resolver):
    ot = OwnTime(sampler, resolver)
    assert ot.stacktraces() == [
        [WORK, MAIN],
        [LOOP, WORK, MAIN],
        [LOOP, LOOP, MAIN],
    ]
    assert resolver.resolve.call_count == 4


def test_stacktraces_cached(sampler, resolver):
    ot = OwnTime(sampler, resolver)
    first = ot.stacktraces()
    second = ot.stacktraces()
    assert second is first
    assert resolver.resolve.call_count == 4


def test_stacktraces_refresh_on_new_data(sampler, resolver):
    ot = OwnTime(sampler, resolver)
    ot.stacktraces()
    sampler.record([2, 3])
    sts = ot.stacktraces()
    assert sts[-1] == [MAIN]
    assert ot.cache.buffer == ot.reader.last_fetched
    assert resolver.resolve.call_count == 8


def test_clear_forces_resolution(sampler, resolver):
    ot = OwnTime(sampler, resolver)
    ot.stacktraces()
    ot.clear()
    assert not ot.cache
    ot.stacktraces()
    assert resolver.resolve.call_count == 8


def test_fetch_between_calls_does_not_return_stale_result(sampler, resolver):
    ot = OwnTime(sampler, resolver)
    ot.stacktraces()
    sampler.record([1, 3])
    # fetch() consumes the "new data" flag; the cache must still notice
    # that it holds a different buffer.
    _, _, new = ot.fetch()
    assert new
    sts = ot.stacktraces()
    assert sts[-1] == [WORK]


def test_shared_cache(sampler, resolver):
    cache = ResultCache()
    OwnTime(sampler, resolver, cache=cache).stacktraces()
    assert cache.stacktraces is not None
    assert cache.buffer == [1, 2, 3, 0, 4, 1, 2, 3, 0, 4, 4, 2, 3, 0]


def test_owntime(sampler, resolver):
    fcs = OwnTime(sampler, resolver).owntime()
    assert fcs.counts == [(LOOP, 2), (WORK, 1)]
    assert fcs.total == 3


def test_totaltime(sampler, resolver):
    fcs = OwnTime(sampler, resolver).totaltime()
    assert fcs.counts == [(MAIN, 3), (WORK, 2), (LOOP, 2)]
    assert fcs.total == 3


def test_owntime_with_filter(sampler, resolver):
    fcs = OwnTime(sampler, resolver).owntime(stackframe_filter=filecontains("main.py"))
    assert fcs.counts == [(MAIN, 3)]


def test_owntime_explicit_stacktraces(sampler, resolver):
    ot = OwnTime(sampler, resolver)
    fcs = ot.owntime([[MAIN], [MAIN, WORK]])
    assert fcs.counts == [(MAIN, 2)]
    assert fcs.total == 2
    resolver.resolve.assert_not_called()


def test_full_buffer_warning():
    sampler = ArraySampler(capacity=3)
    sampler.record([2, 1])
    ot = OwnTime(sampler, MappingSymbolResolver(SYMBOLS))
    with pytest.warns(ProfileBufferFullWarning) as rec:
        sts = ot.stacktraces()
    assert len(rec) == 1
    assert sts == [[MAIN, WORK]]
    # A cache hit still warns, once.
    with pytest.warns(ProfileBufferFullWarning) as rec:
        assert ot.stacktraces() is sts
    assert len(rec) == 1


def test_full_buffer_warning_suppressed():
    sampler = ArraySampler(capacity=3)
    sampler.record([2, 1])
    ot = OwnTime(sampler, MappingSymbolResolver(SYMBOLS))
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        assert ot.backtraces(warn_on_full_buffer=False) == [[2, 1]]


def test_full_buffer_warning_suppressed_by_args():
    sampler = ArraySampler(capacity=3)
    sampler.record([2, 1])
    args = OwnTimeArguments()
    args.warn_on_full_buffer = False
    ot = OwnTime(sampler, MappingSymbolResolver(SYMBOLS), args=args)
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        assert ot.totaltime().total == 1


def test_resolution_failure_leaves_cache_untouched(sampler):
    ot = OwnTime(sampler, MappingSymbolResolver(SYMBOLS))
    sts = ot.stacktraces()
    sampler.record([99])
    with pytest.raises(SymbolResolutionError):
        ot.stacktraces()
    assert ot.cache.stacktraces is sts


def full_owntime(address: int) -> OwnTime:
    sampler = ArraySampler(capacity=2)
    sampler.record([address])
    return OwnTime(sampler, MappingSymbolResolver(SYMBOLS))


@pytest.mark.parametrize(
    "call",
    [
        lambda ot: ot.backtraces(),
        lambda ot: ot.stacktraces(),
        lambda ot: ot.owntime(),
        lambda ot: ot.totaltime(),
    ],
)
def test_full_buffer_warning_blames_caller(call):
    ot = full_owntime(1)
    with pytest.warns(ProfileBufferFullWarning) as rec:
        call(ot)
    assert len(rec) == 1
    assert rec[0].filename == __file__


def test_full_buffer_warning_repeats_under_default_filter():
    with warnings.catch_warnings(record=True) as rec:
        warnings.simplefilter("default")
        full_owntime(1).owntime()
        full_owntime(2).owntime()
    assert [w.category for w in rec] == [ProfileBufferFullWarning] * 2
    assert all(w.filename == __file__ for w in rec)


def test_sampler_clear_resolves_again(sampler, resolver):
    ot = OwnTime(sampler, resolver)
    assert len(ot.stacktraces()) == 3
    sampler.clear()
    assert ot.stacktraces() == []
    sampler.record([2, 3])
    assert ot.stacktraces() == [[MAIN]]


def test_loaded_buffer_pipeline(resolver):
    sampler = ArraySampler(capacity=3)
    sampler.load([1, 0, 2, 0, 3])
    ot = OwnTime(sampler, resolver)
    assert ot.backtraces(warn_on_full_buffer=False) == [[1]]
    assert ot.owntime(warn_on_full_buffer=False).counts == [(WORK, 1)]


def test_clear_resets_new_data_flag(sampler, resolver):
    ot = OwnTime(sampler, resolver)
    ot.fetch()
    ot.clear()
    _, _, new = ot.fetch()
    assert new
