"""Locks that run a function on the protected value while held."""

from __future__ import annotations

import asyncio
import contextlib
import threading
from typing import AsyncIterator, Callable, Generic, Iterator, TypeVar

T = TypeVar("T")
R = TypeVar("R")


class _Cell(Generic[T]):
    __slots__ = ("value",)

    def __init__(self, value: T) -> None:
        self.value = value


class Guard(Generic[T]):
    """Access to a locked value, valid only while the lock is held."""

    __slots__ = ("_cell", "_writable", "_active")

    def __init__(self, cell: _Cell[T], writable: bool) -> None:
        self._cell = cell
        self._writable = writable
        self._active = True

    def _check(self) -> None:
        if not self._active:
            raise RuntimeError("guard used after its lock was released")

    @property
    def value(self) -> T:
        """The protected value."""
        self._check()
        return self._cell.value

    @value.setter
    def value(self, new_value: T) -> None:
        self._check()
        if not self._writable:
            raise AttributeError("read guard cannot change the value")
        self._cell.value = new_value

    def _release(self) -> None:
        self._active = False


def _apply(cell: _Cell[T], writable: bool, func: Callable[[Guard[T]], R]) -> R:
    guard = Guard(cell, writable)
    try:
        return func(guard)
    finally:
        guard._release()


class Mutex(Generic[T]):
    """Thread mutex around a value."""

    def __init__(self, value: T) -> None:
        self._cell = _Cell(value)
        self._lock = threading.Lock()

    def map_lock(self, func: Callable[[Guard[T]], R]) -> R:
        """Call ``func`` with a guard while holding the lock; return its result."""
        with self._lock:
            return _apply(self._cell, True, func)


class RwLock(Generic[T]):
    """Thread reader-writer lock around a value; waiting writers go first."""

    def __init__(self, value: T) -> None:
        self._cell = _Cell(value)
        self._cond = threading.Condition()
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextlib.contextmanager
    def _reading(self) -> Iterator[None]:
        with self._cond:
            self._cond.wait_for(lambda: not self._writer and self._waiting_writers == 0)
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextlib.contextmanager
    def _writing(self) -> Iterator[None]:
        with self._cond:
            self._waiting_writers += 1
            try:
                self._cond.wait_for(lambda: not self._writer and self._readers == 0)
            finally:
                self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()

    def map_read(self, func: Callable[[Guard[T]], R]) -> R:
        """Call ``func`` with a read-only guard under a shared lock."""
        with self._reading():
            return _apply(self._cell, False, func)

    def map_write(self, func: Callable[[Guard[T]], R]) -> R:
        """Call ``func`` with a writable guard under an exclusive lock."""
        with self._writing():
            return _apply(self._cell, True, func)


class AsyncMutex(Generic[T]):
    """Asyncio mutex around a value."""

    def __init__(self, value: T) -> None:
        self._cell = _Cell(value)
        self._lock = asyncio.Lock()

    async def map_lock(self, func: Callable[[Guard[T]], R]) -> R:
        """Call ``func`` with a guard once the lock is acquired."""
        async with self._lock:
            return _apply(self._cell, True, func)


class AsyncRwLock(Generic[T]):
    """Asyncio reader-writer lock around a value; waiting writers go first."""

    def __init__(self, value: T) -> None:
        self._cell = _Cell(value)
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextlib.asynccontextmanager
    async def _reading(self) -> AsyncIterator[None]:
        async with self._cond:
            await self._cond.wait_for(
                lambda: not self._writer and self._waiting_writers == 0
            )
            self._readers += 1
        try:
            yield
        finally:
            async with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextlib.asynccontextmanager
    async def _writing(self) -> AsyncIterator[None]:
        async with self._cond:
            self._waiting_writers += 1
            try:
                await self._cond.wait_for(lambda: not self._writer and self._readers == 0)
            finally:
                self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            async with self._cond:
                self._writer = False
                self._cond.notify_all()

    async def map_read(self, func: Callable[[Guard[T]], R]) -> R:
        """Call ``func`` with a read-only guard under a shared lock."""
        async with self._reading():
            return _apply(self._cell, False, func)

    async def map_write(self, func: Callable[[Guard[T]], R]) -> R:
        """Call ``func`` with a writable guard under an exclusive lock."""
        async with self._writing():
            return _apply(self._cell, True, func)