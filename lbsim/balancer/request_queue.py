"""
Request Queue
=============
FIFO queue chứa các requests đang chờ được assign cho server.

Queue không tự giới hạn capacity; admission cap do LoadBalancer kiểm soát.

Usage:
    >>> queue = RequestQueue()
    >>> queue.enqueue(WorkItem('10.0.0.1', '10.0.0.2', 12))
    >>> item = queue.dequeue()
"""

from collections import deque
from typing import Deque, Iterator

from .errors import EmptyQueueError
from .request import WorkItem


class RequestQueue:
    """FIFO queue của WorkItem (thứ tự insert = thứ tự phục vụ)."""

    def __init__(self):
        self._items: Deque[WorkItem] = deque()

    def enqueue(self, item: WorkItem) -> None:
        """Thêm request vào cuối queue."""
        self._items.append(item)

    def dequeue(self) -> WorkItem:
        """
        Lấy request ở đầu queue.

        Raises:
            EmptyQueueError: Nếu queue rỗng
        """
        if not self._items:
            raise EmptyQueueError("Queue is empty")
        return self._items.popleft()

    def front(self) -> WorkItem:
        """Xem request ở đầu queue mà không lấy ra."""
        if not self._items:
            raise EmptyQueueError("Queue is empty")
        return self._items[0]

    def is_empty(self) -> bool:
        return not self._items

    def size(self) -> int:
        return len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[WorkItem]:
        return iter(self._items)
