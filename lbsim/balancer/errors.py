"""
Simulation Errors
=================
Các exceptions cho vi phạm contract trong simulation core.

Lưu ý: request bị từ chối khi queue đầy KHÔNG phải lỗi,
LoadBalancer.admit() trả về False và tăng rejected_count.
"""


class SimulationError(Exception):
    """Base class cho mọi lỗi của simulation core."""


class EmptyQueueError(SimulationError):
    """Gọi dequeue() hoặc front() khi RequestQueue rỗng."""


class DoubleAssignmentError(SimulationError):
    """Assign request cho một WebServer đang busy."""

    def __init__(self, server_id: int):
        self.server_id = server_id
        super().__init__(f"Server {server_id} is already processing a request")
