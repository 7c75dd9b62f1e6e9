"""
Balancer Module
===============
Simulation core: queue, web servers, load balancer và simulator.

Classes:
- WorkItem: Request cần xử lý
- RequestQueue: FIFO queue các requests đang chờ
- WebServer: Server xử lý từng request một
- LoadBalancer: Scheduler với bounded queue và elastic scaling
- BalancerPolicy: Cấu hình admission cap và scaling thresholds
- LoadBalancerSimulator: Driver chạy simulation nhiều cycles
- SimulationConfig: Cấu hình một lần chạy

Enums:
- ScaleAction: NONE, SCALE_OUT, SCALE_IN

Exceptions:
- SimulationError, EmptyQueueError, DoubleAssignmentError
"""

from .errors import SimulationError, EmptyQueueError, DoubleAssignmentError
from .request import WorkItem
from .request_queue import RequestQueue
from .web_server import WebServer
from .policy import BalancerPolicy, ScaleAction, ScalingEvent
from .load_balancer import LoadBalancer
from .simulator import LoadBalancerSimulator, SimulationConfig

__all__ = [
    'SimulationError',
    'EmptyQueueError',
    'DoubleAssignmentError',
    'WorkItem',
    'RequestQueue',
    'WebServer',
    'BalancerPolicy',
    'ScaleAction',
    'ScalingEvent',
    'LoadBalancer',
    'LoadBalancerSimulator',
    'SimulationConfig'
]
