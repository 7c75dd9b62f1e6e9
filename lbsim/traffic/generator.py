"""
Request Generator
=================
Sinh requests ngẫu nhiên cho simulation: IP nguồn, IP đích và processing time.

Randomness được inject qua numpy Generator để simulation có thể tái lập
(cùng seed -> cùng chuỗi requests).

Usage:
    >>> generator = RequestGenerator(rng=np.random.default_rng(42))
    >>> item = generator.produce_work_item()
    >>> print(item.source, item.destination, item.duration)
"""

from typing import List, Optional

import numpy as np

from ..balancer.request import WorkItem


class RequestGenerator:
    """
    Nguồn requests ngẫu nhiên.

    Attributes:
        rng: numpy Generator dùng cho mọi random draw
        min_time: Processing time nhỏ nhất (ticks)
        max_time: Processing time lớn nhất (ticks, inclusive)
    """

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        min_time: int = 10,
        max_time: int = 19
    ):
        if min_time > max_time:
            raise ValueError(f"min_time ({min_time}) > max_time ({max_time})")

        self.rng = rng if rng is not None else np.random.default_rng()
        self.min_time = min_time
        self.max_time = max_time

    @classmethod
    def from_seed(cls, seed: Optional[int] = None, **kwargs) -> "RequestGenerator":
        return cls(rng=np.random.default_rng(seed), **kwargs)

    def generate_ip(self) -> str:
        """Sinh một địa chỉ IPv4 ngẫu nhiên."""
        octets = self.rng.integers(0, 256, size=4)
        return ".".join(str(int(o)) for o in octets)

    def produce_work_item(self) -> WorkItem:
        """Sinh một request với IPs và processing time ngẫu nhiên."""
        return WorkItem(
            source=self.generate_ip(),
            destination=self.generate_ip(),
            duration=int(self.rng.integers(self.min_time, self.max_time + 1))
        )

    def produce_batch(self, n: int) -> List[WorkItem]:
        return [self.produce_work_item() for _ in range(n)]

    def should_arrive(self, chance: float) -> bool:
        """
        Quyết định có request mới trong cycle này hay không.

        Args:
            chance: Xác suất (%) có một request mới, trong [0, 100]
        """
        return int(self.rng.integers(0, 100)) < chance
