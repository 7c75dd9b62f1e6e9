"""
Load Balancer Module
====================
Scheduler chính của server farm: sở hữu pool WebServers và RequestQueue.

Thứ tự trong một cycle:
    1. assign_requests(): giao request đầu queue cho các server idle
    2. tick(): tất cả servers tiến 1 đơn vị thời gian, clock += 1
    3. scale(): áp dụng elastic scaling policy
    4. (caller) admit(): nhận request mới nếu queue chưa đầy

Usage:
    >>> balancer = LoadBalancer(num_servers=10)
    >>> for _ in range(1000):
    ...     balancer.run_cycle()
    ...     balancer.admit(generator.produce_work_item())
    >>> print(balancer.snapshot())
"""

from typing import Dict, List, Optional

import pandas as pd

from .policy import BalancerPolicy, ScaleAction, ScalingEvent
from .request import WorkItem
from .request_queue import RequestQueue
from .web_server import WebServer


class LoadBalancer:
    """
    Load balancer với bounded queue và elastic server pool.

    Pool order là thứ tự tạo server (server cũ nhất trước), cũng là
    thứ tự ưu tiên khi assign và khi chọn server để bỏ lúc scale in.

    Attributes:
        policy: BalancerPolicy instance
        servers: Pool servers hiện tại
        request_queue: Queue các requests đang chờ
        clock: Số ticks đã trôi qua
        rejected_count: Tổng số requests bị từ chối do queue đầy
        scaling_history: Lịch sử các scaling events

    Example:
        >>> balancer = LoadBalancer(5)
        >>> balancer.add_request(WorkItem('1.1.1.1', '2.2.2.2', 3))
        >>> balancer.run_cycle()
        >>> balancer.busy_server_count
        1
    """

    def __init__(self, num_servers: int, policy: Optional[BalancerPolicy] = None):
        """
        Khởi tạo load balancer.

        Args:
            num_servers: Số servers ban đầu
            policy: Cấu hình policy (mặc định: BalancerPolicy())
        """
        if num_servers < 0:
            raise ValueError(f"num_servers must be non-negative, got {num_servers}")

        self.policy = policy or BalancerPolicy()
        self.servers: List[WebServer] = [WebServer() for _ in range(num_servers)]
        self.request_queue = RequestQueue()

        # State
        self.clock = 0
        self.rejected_count = 0
        self.retired_processed = 0  # completed_count của các servers đã bị scale in

        # History
        self.scaling_history: List[ScalingEvent] = []

    # ------------------------------------------------------------------
    # Queue input
    # ------------------------------------------------------------------

    def add_request(self, item: WorkItem) -> None:
        """Enqueue không kiểm tra capacity (dùng để tạo backlog ban đầu)."""
        self.request_queue.enqueue(item)

    def admit(self, item: WorkItem) -> bool:
        """
        Nhận request mới nếu queue chưa đầy.

        queue_capacity là độ dài queue tối đa: queue đã có đúng
        queue_capacity requests thì request mới bị từ chối.

        Args:
            item: Request mới

        Returns:
            True nếu request được đưa vào queue, False nếu bị từ chối
        """
        if self.request_queue.size() >= self.policy.queue_capacity:
            self.rejected_count += 1
            return False

        self.request_queue.enqueue(item)
        return True

    # ------------------------------------------------------------------
    # Cycle operations
    # ------------------------------------------------------------------

    def assign_requests(self) -> int:
        """
        Giao requests cho các server idle theo pool order.

        Returns:
            Số requests đã được assign
        """
        assigned = 0
        for server in self.servers:
            if self.request_queue.is_empty():
                break
            if server.is_idle():
                server.assign_request(self.request_queue.dequeue())
                assigned += 1
        return assigned

    def tick(self) -> int:
        """
        Tiến tất cả servers một tick rồi tăng clock.

        Returns:
            Số requests hoàn thành trong tick này
        """
        completed = sum(1 for server in self.servers if server.tick())
        self.clock += 1
        return completed

    def scale(self) -> ScaleAction:
        """
        Áp dụng elastic scaling policy một lần.

        Returns:
            ScaleAction đã thực hiện
        """
        queue_size = self.request_queue.size()
        old_servers = len(self.servers)

        if (queue_size > self.policy.scale_out_queue_length
                and old_servers < self.policy.max_servers):
            self.servers.append(WebServer())
            action = ScaleAction.SCALE_OUT

        elif (queue_size < self.policy.scale_in_queue_length
                and old_servers > self.policy.min_servers):
            idle_index = self._first_idle_index()
            if idle_index is None:
                return ScaleAction.NONE
            self.retired_processed += self.servers.pop(idle_index).completed_count
            action = ScaleAction.SCALE_IN

        else:
            return ScaleAction.NONE

        self.scaling_history.append(ScalingEvent(
            cycle=self.clock,
            action=action.value,
            old_servers=old_servers,
            new_servers=len(self.servers),
            queue_size=queue_size
        ))
        return action

    def run_cycle(self) -> ScaleAction:
        """Một cycle đầy đủ: assign -> tick -> scale."""
        self.assign_requests()
        self.tick()
        return self.scale()

    def _first_idle_index(self) -> Optional[int]:
        for index, server in enumerate(self.servers):
            if server.is_idle():
                return index
        return None

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    @property
    def queue_size(self) -> int:
        return self.request_queue.size()

    @property
    def server_count(self) -> int:
        return len(self.servers)

    @property
    def busy_server_count(self) -> int:
        return sum(1 for server in self.servers if server.is_running())

    @property
    def idle_server_count(self) -> int:
        return self.server_count - self.busy_server_count

    @property
    def total_processed(self) -> int:
        """Tổng requests đã xử lý, tính lại từ per-server counters."""
        return self.retired_processed + sum(server.completed_count for server in self.servers)

    def snapshot(self) -> Dict[str, int]:
        """Lấy tất cả counters hiện tại."""
        busy = self.busy_server_count
        return {
            'clock': self.clock,
            'queue_size': self.queue_size,
            'servers': self.server_count,
            'busy_servers': busy,
            'idle_servers': self.server_count - busy,
            'processed': self.total_processed,
            'rejected': self.rejected_count
        }

    def get_scaling_history(self) -> pd.DataFrame:
        """Lấy scaling history dưới dạng DataFrame."""
        if not self.scaling_history:
            return pd.DataFrame()

        return pd.DataFrame([
            {
                'cycle': e.cycle,
                'action': e.action,
                'old_servers': e.old_servers,
                'new_servers': e.new_servers,
                'queue_size': e.queue_size
            }
            for e in self.scaling_history
        ])

    def get_stats(self) -> Dict:
        """Lấy thống kê về scaling."""
        history_df = self.get_scaling_history()

        if len(history_df) == 0:
            return {
                'total_events': 0,
                'scale_out_count': 0,
                'scale_in_count': 0
            }

        return {
            'total_events': len(history_df),
            'scale_out_count': int((history_df['action'] == 'scale_out').sum()),
            'scale_in_count': int((history_df['action'] == 'scale_in').sum())
        }
