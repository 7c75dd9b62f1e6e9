"""Work item được xử lý bởi web servers."""

from dataclasses import dataclass


@dataclass(frozen=True)
class WorkItem:
    """
    Một request gửi tới server farm.

    Attributes:
        source: IP nguồn (vd: '192.168.0.1')
        destination: IP đích
        duration: Số ticks cần để xử lý xong request
    """
    source: str
    destination: str
    duration: int
