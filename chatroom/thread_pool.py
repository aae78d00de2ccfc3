"""A fixed-size pool of worker threads fed from a task queue."""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable, Deque

_log = logging.getLogger(__name__)


class ThreadPool:
    """Runs submitted callables on a fixed set of worker threads."""

    def __init__(self, num_threads: int, name: str = "") -> None:
        self.name = name
        self._tasks: Deque[Callable[[], object]] = deque()
        self._condition = threading.Condition()
        self._stopped = False
        self._threads = [
            threading.Thread(target=self._work, name=f"{name}-{index}", daemon=True)
            for index in range(num_threads)
        ]
        for thread in self._threads:
            thread.start()

    def _work(self) -> None:
        while not self._stopped:
            with self._condition:
                self._condition.wait_for(lambda: self._stopped or bool(self._tasks))
                if not self._tasks:
                    break
                task = self._tasks.popleft()
            try:
                task()
            except Exception:
                _log.exception("task failed in pool %r", self.name)

    def add_task(self, task: Callable[[], object]) -> None:
        """Queue a callable and wake one worker to run it."""
        with self._condition:
            if self._stopped:
                raise RuntimeError(f"thread pool {self.name!r} is stopped")
            self._tasks.append(task)
            self._condition.notify()

    def stop(self) -> None:
        """Stop the workers and wait for them to finish; safe to call twice."""
        with self._condition:
            if self._stopped:
                return
            self._stopped = True
            self._condition.notify_all()
        current = threading.current_thread()
        for thread in self._threads:
            if thread is not current:
                thread.join()

    def __len__(self) -> int:
        return len(self._threads)

    def __enter__(self) -> ThreadPool:
        return self

    def __exit__(self, *args: object) -> None:
        self.stop()