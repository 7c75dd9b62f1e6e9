"""
LOAD BALANCER SIMULATION PROJECT
================================
Mô phỏng discrete-time một server farm có load balancer:
request queue có giới hạn, pool các web servers xử lý từng request một,
và policy tự động scale số servers theo độ dài queue.

Modules:
- balancer: WorkItem, RequestQueue, WebServer, LoadBalancer, simulator
- traffic: Request generator (random IPs, processing time)
- logging_config: Cấu hình logging cho library
"""

import logging

__version__ = "1.0.0"
__author__ = "Load Balancer Simulation Team"

logging.getLogger(__name__).addHandler(logging.NullHandler())

# balancer phải load trước traffic (generator dùng WorkItem)
from .balancer import (
    BalancerPolicy,
    LoadBalancer,
    LoadBalancerSimulator,
    ScaleAction,
    SimulationConfig,
    WorkItem
)
from .traffic import RequestGenerator

__all__ = [
    'BalancerPolicy',
    'LoadBalancer',
    'LoadBalancerSimulator',
    'ScaleAction',
    'SimulationConfig',
    'WorkItem',
    'RequestGenerator'
]
