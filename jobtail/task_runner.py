"""Runs tasks off the UI loop and queues the messages they produce"""

import concurrent.futures
import logging
import queue
import threading
import time
from typing import Callable

from jobtail.follower import Message, Task

logger = logging.getLogger(__name__)

MAX_WORKERS = 8


class TaskRunner:
    """Thread pool whose results are handed back to a single consumer thread"""

    def __init__(self, max_workers: int = MAX_WORKERS) -> None:
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="jobtail-task"
        )
        self._messages: queue.Queue[Message] = queue.Queue()
        self._lock = threading.Lock()
        self._pending = 0

    @property
    def pending(self) -> int:
        """Number of submitted tasks that have not finished"""
        with self._lock:
            return self._pending

    def submit(self, task: Task) -> None:
        """Run a task in the background"""
        with self._lock:
            self._pending += 1
        self._executor.submit(self._run, task)

    def submit_all(self, tasks: list[Task]) -> None:
        """Run several tasks in the background"""
        for task in tasks:
            self.submit(task)

    def _run(self, task: Task) -> None:
        try:
            message = task()
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("Task %r failed", task)
            message = None
        try:
            if message is not None:
                self._messages.put(message)
        finally:
            with self._lock:
                self._pending -= 1

    def poll(self) -> list[Message]:
        """Get every message that is ready without blocking"""
        messages = []
        while True:
            try:
                messages.append(self._messages.get_nowait())
            except queue.Empty:
                return messages

    def drain(
        self, handler: Callable[[Message], list[Task]], timeout: float = 2.0
    ) -> None:
        """Deliver messages until no task is left or the timeout expires.

        Tasks returned by the handler are submitted as well.
        """
        deadline = time.monotonic() + timeout
        while self.pending or not self._messages.empty():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.warning("Gave up waiting for %d tasks", self.pending)
                return
            try:
                message = self._messages.get(timeout=min(remaining, 0.05))
            except queue.Empty:
                continue
            self.submit_all(handler(message))

    def shutdown(self) -> None:
        """Stop accepting tasks and drop the ones that have not started"""
        self._executor.shutdown(wait=False, cancel_futures=True)
