"""
Balancer Policy Module
======================
Module định nghĩa các hằng số policy cho admission và elastic scaling.

Scaling rule (áp dụng mỗi cycle, sau khi servers tick):
    1. Queue dài hơn scale_out_queue_length và chưa đạt max_servers
       -> thêm 1 server
    2. Queue ngắn hơn scale_in_queue_length và còn trên min_servers
       -> bỏ 1 server đang idle (server idle đầu tiên theo pool order)
    3. Còn lại -> giữ nguyên

Hai điều kiện loại trừ nhau vì scale_in_queue_length < scale_out_queue_length,
nên mỗi cycle có tối đa một thay đổi.

Usage:
    >>> policy = BalancerPolicy(queue_capacity=1000, max_servers=20)
    >>> balancer = LoadBalancer(10, policy)
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict


class ScaleAction(Enum):
    """Các actions scaling có thể thực hiện."""
    NONE = "none"
    SCALE_OUT = "scale_out"  # Thêm server
    SCALE_IN = "scale_in"    # Bỏ server idle


@dataclass
class BalancerPolicy:
    """
    Cấu hình policy của load balancer.

    Attributes:
        queue_capacity: Độ dài queue tối đa, request mới bị từ chối khi queue đầy
        scale_out_queue_length: Queue dài hơn ngưỡng này -> scale out
        scale_in_queue_length: Queue ngắn hơn ngưỡng này -> scale in
        min_servers: Số servers tối thiểu khi scale in
        max_servers: Số servers tối đa khi scale out
    """
    queue_capacity: int = 1000
    scale_out_queue_length: int = 500
    scale_in_queue_length: int = 100
    min_servers: int = 5
    max_servers: int = 20

    def __post_init__(self):
        if self.queue_capacity <= 0:
            raise ValueError(f"queue_capacity must be positive, got {self.queue_capacity}")
        if self.min_servers < 0:
            raise ValueError(f"min_servers must be non-negative, got {self.min_servers}")
        if self.min_servers > self.max_servers:
            raise ValueError(
                f"min_servers ({self.min_servers}) > max_servers ({self.max_servers})"
            )
        if self.scale_in_queue_length >= self.scale_out_queue_length:
            raise ValueError(
                f"scale_in_queue_length ({self.scale_in_queue_length}) must be lower than "
                f"scale_out_queue_length ({self.scale_out_queue_length})"
            )

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class ScalingEvent:
    """Record của một scaling event."""
    cycle: int
    action: str
    old_servers: int
    new_servers: int
    queue_size: int
