"""
SeqFlow - Stream Helpers

The kernels consume asynchronous, pull-based streams. Plain iterables
(lists, generators, file readers) are accepted too and adapted here.
"""

from typing import AsyncIterable, AsyncIterator, Iterable, List, TypeVar, Union


T = TypeVar("T")

Source = Union[AsyncIterable[T], Iterable[T]]


async def aiterate(source: Source) -> AsyncIterator[T]:
    """Iterate ``source`` asynchronously whether it is async or not."""
    if hasattr(source, "__aiter__"):
        async for item in source:
            yield item
    else:
        for item in source:
            yield item


async def collect(source: Source) -> List[T]:
    """Drain a stream into a list."""
    return [item async for item in aiterate(source)]
