"""Sequential task runner.

All bulk operations (bootstrap, release, publish, ...) run one package at a
time through for_each(). Later packages may depend on side effects of earlier
ones (linked dependencies, bumped versions), so there is no parallelism.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TypeVar

from .shell import step

T = TypeVar("T")
R = TypeVar("R")


def for_each(items: Iterable[T], task: Callable[[T], R | bool]) -> R | bool:
    """Run ``task`` on each item strictly in order.

    A task returning ``False`` stops the run: every remaining item is
    reported as skipped and never passed to ``task``. Exceptions raised by
    a task propagate immediately.

    Returns:
        The last task result, ``False`` if the run was stopped, or ``True``
        when ``items`` is empty.
    """
    result: R | bool = True
    for item in items:
        if result is False:
            step(f"Skipping {item}")
            continue
        result = task(item)
    return result
