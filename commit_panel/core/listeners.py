"""Ordered listener lists with snapshot dispatch."""

from __future__ import annotations

from collections import deque
from typing import Any, Callable

Listener = Callable[..., Any]


class ListenerHandle:
    """Returned by :meth:`ListenerList.add`; ``dispose()`` unregisters."""

    __slots__ = ("_owner", "_listener")

    def __init__(self, owner: "ListenerList", listener: Listener) -> None:
        self._owner: ListenerList | None = owner
        self._listener = listener

    @property
    def disposed(self) -> bool:
        return self._owner is None

    def dispose(self) -> None:
        owner = self._owner
        if owner is None:
            return
        self._owner = None
        owner._release(self._listener)


class ListenerList:
    """
    Listeners are called in registration order. ``fire`` iterates over a copy
    of the list, and a ``fire`` issued from inside a listener is queued until
    the running round completes, so dispatch never nests.

    Adding the same listener twice registers it once; each returned handle
    holds a reference, and the listener stays registered until every handle
    is disposed. ``remove`` drops it regardless of outstanding handles.

    If a listener raises, the remaining listeners and queued rounds are still
    delivered and the first exception is re-raised afterwards.
    """

    def __init__(self) -> None:
        self._listeners: list[Listener] = []
        self._refs: list[int] = []
        self._queue: deque[tuple[Any, ...]] = deque()
        self._dispatching = False

    def __len__(self) -> int:
        return len(self._listeners)

    def __bool__(self) -> bool:
        return bool(self._listeners)

    @property
    def is_dispatching(self) -> bool:
        return self._dispatching

    def add(self, listener: Listener) -> ListenerHandle:
        if not callable(listener):
            raise TypeError("listener must be callable")
        try:
            index = self._listeners.index(listener)
        except ValueError:
            self._listeners.append(listener)
            self._refs.append(1)
        else:
            self._refs[index] += 1
        return ListenerHandle(self, listener)

    def remove(self, listener: Listener) -> bool:
        try:
            index = self._listeners.index(listener)
        except ValueError:
            return False
        del self._listeners[index]
        del self._refs[index]
        return True

    def _release(self, listener: Listener) -> None:
        try:
            index = self._listeners.index(listener)
        except ValueError:
            return
        self._refs[index] -= 1
        if self._refs[index] <= 0:
            del self._listeners[index]
            del self._refs[index]

    def clear(self) -> None:
        self._listeners.clear()
        self._refs.clear()
        self._queue.clear()

    def fire(self, *args: Any) -> None:
        self._queue.append(args)
        if self._dispatching:
            return
        self._dispatching = True
        first_error: BaseException | None = None
        try:
            while self._queue:
                payload = self._queue.popleft()
                for listener in list(self._listeners):
                    if listener not in self._listeners:
                        continue
                    try:
                        listener(*payload)
                    except Exception as exc:
                        if first_error is None:
                            first_error = exc
        finally:
            self._dispatching = False
        if first_error is not None:
            raise first_error
