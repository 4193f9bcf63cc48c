"""Concurrency helpers: task runners that carry contextvars into worker threads."""

import contextvars
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import TypeVar

R = TypeVar("R")
I = TypeVar("I")
O = TypeVar("O")


def create_task_runner(max_workers: int = 4, name: str = "agentcloud") -> ThreadPoolExecutor:
    """Thread pool for provisioning jobs.

    Args:
        max_workers: Number of node creations that may run at once.
        name: Thread name prefix.
    """
    return ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=name)


def submit_in_context(
    executor: Executor,
    fn: Callable[..., R],
    *args: object,
) -> Future[R]:
    """Submit ``fn`` so that it runs in a copy of the caller's context."""
    return executor.submit(contextvars.copy_context().run, fn, *args)


def map_async(
    fn: Callable[[I], O],
    items: Iterable[I],
    concurrency: int | None = None,
) -> Iterator[O]:
    """Apply function to items concurrently, preserving order.

    Args:
        fn: Function to apply to each item.
        items: Items to process.
        concurrency: Max concurrent workers. None = len(items).

    Yields:
        Results in same order as input items.
    """
    items_list = list(items)
    if not items_list:
        return

    # ctx.run cannot be entered concurrently, so each task gets its own copy
    workers = concurrency if concurrency is not None else len(items_list)
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [submit_in_context(executor, fn, item) for item in items_list]
        for future in futures:
            yield future.result()


def for_each_async(
    fn: Callable[[I], object],
    items: Iterable[I],
    concurrency: int | None = None,
) -> None:
    """Apply function to items concurrently, discarding results.

    Raises:
        Exception: First exception encountered, in input order.
    """
    for _ in map_async(fn, items, concurrency):
        pass
