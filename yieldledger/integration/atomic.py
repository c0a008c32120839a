"""
Atomic units spanning several components.

``atomic(*participants)`` snapshots every participant on entry. If the body
raises, every participant is restored (in reverse order) and the exception
propagates unchanged.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from .ports import Transactional

logger = logging.getLogger(__name__)


@contextmanager
def atomic(*participants: Transactional) -> Iterator[None]:
    for p in participants:
        if not isinstance(p, Transactional):
            raise TypeError(f"{type(p).__name__} cannot take part in an atomic unit")
    snapshots = [(p, p.snapshot()) for p in participants]
    try:
        yield
    except BaseException as exc:
        for p, snap in reversed(snapshots):
            p.restore(snap)
        logger.info("atomic unit rolled back %d participants: %s", len(snapshots), exc)
        raise
