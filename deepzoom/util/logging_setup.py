import logging
import logging.handlers
import multiprocessing as mp
from contextlib import contextmanager
from typing import Iterator, List, Optional

_LOGGER_NAME = "deepzoom"

def get_logger() -> logging.Logger:
    return logging.getLogger(_LOGGER_NAME)

def frame_tag(frame_id: Optional[object]) -> str:
    return "[Frame -]" if frame_id is None else f"[Frame {frame_id}]"

def _build_formatter() -> logging.Formatter:
    return logging.Formatter(
        fmt="%(asctime)s.%(msecs)03dZ %(processName)s %(levelname)s %(name)s - %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

def _reset(logger: logging.Logger, level: int, handlers: List[logging.Handler]) -> None:
    logger.setLevel(level)
    logger.propagate = False
    for h in list(logger.handlers):
        logger.removeHandler(h)
    for h in handlers:
        h.setLevel(level)
        logger.addHandler(h)

def build_handlers(
    *,
    console: bool = True,
    log_file: Optional[str] = None,
    rotate_bytes: int = 5 * 1024 * 1024,
    rotate_count: int = 5,
) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler())
    if log_file:
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file, maxBytes=rotate_bytes, backupCount=rotate_count, encoding="utf-8"
        ))
    fmt = _build_formatter()
    for h in handlers:
        h.setFormatter(fmt)
    return handlers

@contextmanager
def logging_session(
    *,
    level: int = logging.INFO,
    console: bool = True,
    log_file: Optional[str] = None,
) -> Iterator[mp.Queue]:
    """Configure the package logger and yield the queue worker processes log into.

    Records put on the queue are written by a listener thread using the same
    handlers as the parent process.
    """
    handlers = build_handlers(console=console, log_file=log_file)
    _reset(get_logger(), level, handlers)
    queue: mp.Queue = mp.Queue(-1)
    listener = logging.handlers.QueueListener(queue, *handlers, respect_handler_level=True)
    listener.start()
    try:
        yield queue
    finally:
        listener.stop()
        for h in handlers:
            h.close()

def logging_initialiser(queue: Optional[mp.Queue], level: int) -> None:
    """Pool initializer: route this worker's records through ``queue``.

    Bands rendered in-process pass None and keep the parent's handlers.
    """
    if queue is None:
        return
    qh = logging.handlers.QueueHandler(queue)
    _reset(get_logger(), level, [qh])
