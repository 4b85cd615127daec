from typing import Dict, List, Mapping, Protocol, Sequence

from owntime.owntime_statistics import Address, Backtrace, StackFrame, StackTrace


class SymbolResolutionError(LookupError):
    """The symbol resolver failed for an address."""

    def __init__(self, address: int) -> None:
        super().__init__(f"could not resolve address {address:#x}")
        self.address = address


class SymbolResolver(Protocol):
    def resolve(self, address: Address) -> Sequence[StackFrame]:
        """Return the frames at address, innermost (inlined) first."""
        ...


class MappingSymbolResolver:
    """Resolves addresses from a fixed table, e.g. a symbol dump."""

    def __init__(self, table: Mapping[int, Sequence[StackFrame]]) -> None:
        self.table = table

    def resolve(self, address: Address) -> Sequence[StackFrame]:
        return self.table[address]


def resolve_stacktraces(
    backtraces: Sequence[Backtrace], resolver: SymbolResolver
) -> List[StackTrace]:
    """Symbolicate backtraces, dropping native frames.

    Lookups are slow, so each distinct address is resolved only once.
    """
    lookups: Dict[Address, Sequence[StackFrame]] = {}
    for backtrace in backtraces:
        for address in backtrace:
            if address in lookups:
                continue
            try:
                lookups[address] = list(resolver.resolve(address))
            except SymbolResolutionError:
                raise
            except Exception as e:
                raise SymbolResolutionError(address) from e
    sts: List[StackTrace] = []
    for backtrace in backtraces:
        sts.append(
            [
                stackframe
                for address in backtrace
                for stackframe in lookups[address]
                if not stackframe.is_native
            ]
        )
    return sts
