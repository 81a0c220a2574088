# ad/core/tags.py
from __future__ import annotations
import logging
import threading
from contextlib import contextmanager
from typing import Optional

logger = logging.getLogger(__name__)


class TagAllocator:
    """
    Issues tags: integers marking one differentiation scope's infinitesimal.

    Tags are strictly increasing per allocator and never reused, so a tag
    minted inside a nested derivative is always greater than any tag of an
    enclosing one. The lock only covers the increment.
    """
    def __init__(self, start: int = 0):
        self._next = int(start)
        self._lock = threading.Lock()

    def fresh(self) -> int:
        with self._lock:
            tag = self._next
            self._next += 1
        return tag

    def __repr__(self):
        return f"TagAllocator(next={self._next})"


# Global allocator shared by every derivative call in the process
global_allocator = TagAllocator()


def fresh_tag() -> int:
    """Mint a new tag from the active allocator."""
    from . import tags as _tags_mod  # module access for use_allocator() compatibility
    return _tags_mod.global_allocator.fresh()


@contextmanager
def use_allocator(allocator: Optional[TagAllocator] = None):
    """
    Context manager to temporarily use a fresh allocator:
        with use_allocator(TagAllocator(start=100)):
            ... differentiate ...

    Only swap allocators around top-level work: tags minted by the new
    allocator are not ordered against tags still live from the previous one.
    """
    from . import tags as _tags_mod  # local import to avoid cycles
    prev = _tags_mod.global_allocator
    try:
        _tags_mod.global_allocator = allocator or TagAllocator()
        logger.debug("switched tag allocator to %r", _tags_mod.global_allocator)
        yield _tags_mod.global_allocator
    finally:
        _tags_mod.global_allocator = prev
