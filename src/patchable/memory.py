"""Module to store resource items in memory."""

import copy
import logging
import threading
import wrapt


_logger = logging.getLogger(__name__)


@wrapt.decorator
def _with_lock(wrapped, instance, args, kwargs):
    with instance._lock:
        return wrapped(*args, **kwargs)


class MemoryStore:
    """
    Stores items in a dictionary in memory, keyed by an identifier that the store
    assigns on insert. Items must expose a mutable `id` attribute. Identifiers are
    positive integers, assigned in increasing order and never reused.

    Items are copied on the way in and on the way out; callers never hold a
    reference to a stored item. All operations are serialized by a single lock.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._items = {}
        self._next_id = 1

    @_with_lock
    def get(self, id):
        """Return a copy of the item with the specified identifier, or None."""
        item = self._items.get(id)
        return copy.deepcopy(item) if item is not None else None

    @_with_lock  # iterates over items
    def get_all(self):
        """Return copies of all items, in insertion order."""
        return [copy.deepcopy(item) for item in self._items.values()]

    @_with_lock  # modifies items and identifier counter
    def insert(self, item):
        """Assign the next identifier to the item, store it, and return it."""
        item.id = self._next_id
        self._next_id += 1
        self._items[item.id] = copy.deepcopy(item)
        _logger.debug("inserted item %s", item.id)
        return item

    @_with_lock  # modifies items
    def update(self, item):
        """Store the item under its identifier and return it."""
        self._items[item.id] = copy.deepcopy(item)
        _logger.debug("updated item %s", item.id)
        return item

    @_with_lock  # modifies items
    def delete(self, id):
        """Remove the item with the specified identifier and return it, or None."""
        item = self._items.pop(id, None)
        if item is not None:
            _logger.debug("deleted item %s", id)
        return item

    @_with_lock  # modifies items
    def clear(self):
        """Remove all items. Identifiers already assigned are not reused."""
        self._items.clear()

    @_with_lock
    def __len__(self):
        return len(self._items)
