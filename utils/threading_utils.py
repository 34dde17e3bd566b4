"""Helpers for running work off the calling thread."""

import threading
from collections.abc import Callable


def run_async(target: Callable, *, name: str | None = None, daemon: bool = True) -> threading.Thread:
    thread = threading.Thread(target=target, name=name, daemon=daemon)
    thread.start()
    return thread
