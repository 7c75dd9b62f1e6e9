"""
Web Server
==========
State machine của một server xử lý tối đa một request tại một thời điểm.

States:
    - Idle: không có request, remaining == 0
    - Busy: đang xử lý, remaining giảm 1 mỗi tick

Khi remaining về 0, server chuyển về Idle và completed_count tăng đúng 1
trong cùng tick đó.
"""

import itertools
from typing import Optional

from .errors import DoubleAssignmentError
from .request import WorkItem

_server_ids = itertools.count(1)


class WebServer:
    """
    Server xử lý từng request một.

    Attributes:
        server_id: ID ổn định dùng cho reporting
        busy: Đang xử lý request hay không
        remaining: Số ticks còn lại của request hiện tại
        current: Request đang xử lý (None khi idle)
        completed_count: Tổng số requests đã xử lý xong
    """

    def __init__(self, server_id: Optional[int] = None):
        self.server_id = server_id if server_id is not None else next(_server_ids)
        self.busy = False
        self.remaining = 0
        self.current: Optional[WorkItem] = None
        self.completed_count = 0

    def is_running(self) -> bool:
        return self.busy

    def is_idle(self) -> bool:
        return not self.busy

    def assign_request(self, item: WorkItem) -> None:
        """
        Giao request cho server.

        Args:
            item: WorkItem cần xử lý

        Raises:
            DoubleAssignmentError: Nếu server đang busy
        """
        if self.busy:
            raise DoubleAssignmentError(self.server_id)

        self.current = item
        # duration <= 0 vẫn hoàn thành ở tick kế tiếp
        self.remaining = max(item.duration, 1)
        self.busy = True

    def tick(self) -> bool:
        """
        Tiến một đơn vị thời gian.

        Returns:
            True nếu request hoàn thành trong tick này
        """
        if not self.busy:
            return False

        self.remaining -= 1
        if self.remaining == 0:
            self.busy = False
            self.current = None
            self.completed_count += 1
            return True

        return False

    def __repr__(self) -> str:
        state = f"busy, remaining={self.remaining}" if self.busy else "idle"
        return f"WebServer(id={self.server_id}, {state}, completed={self.completed_count})"
