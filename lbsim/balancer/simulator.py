"""
Load Balancer Simulator
=======================
Driver chạy LoadBalancer qua nhiều cycles với requests ngẫu nhiên.

Mỗi cycle:
    1. balancer.run_cycle() (assign -> tick -> scale)
    2. Với xác suất new_request_chance %, sinh một request và admit()

Cho phép:
    - Theo dõi queue size, số servers, processed/rejected theo thời gian
    - So sánh các policies khác nhau
    - Sensitivity analysis cho một tham số policy

Usage:
    >>> simulator = LoadBalancerSimulator(BalancerPolicy(), SimulationConfig(num_servers=10))
    >>> results = simulator.simulate(total_cycles=10000)
    >>> metrics = simulator.calculate_metrics(results)
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional

import pandas as pd
from tqdm import tqdm

from .load_balancer import LoadBalancer
from .policy import BalancerPolicy, ScaleAction
from ..traffic.generator import RequestGenerator

logger = logging.getLogger(__name__)


@dataclass
class SimulationConfig:
    """
    Cấu hình một lần chạy simulation.

    Attributes:
        num_servers: Số servers ban đầu
        total_cycles: Số clock cycles
        new_request_chance: Xác suất (%) có request mới mỗi cycle
        initial_queue_per_server: Số requests ban đầu trong queue cho mỗi server
        min_request_time: Processing time nhỏ nhất (ticks)
        max_request_time: Processing time lớn nhất (ticks)
        log_interval: Log progress sau mỗi N cycles (0 = tắt)
        seed: Random seed (None = không cố định)
    """
    num_servers: int = 10
    total_cycles: int = 10000
    new_request_chance: float = 65
    initial_queue_per_server: int = 100
    min_request_time: int = 10
    max_request_time: int = 19
    log_interval: int = 1000
    seed: Optional[int] = None

    def __post_init__(self):
        if self.num_servers < 0:
            raise ValueError(f"num_servers must be non-negative, got {self.num_servers}")
        if self.total_cycles <= 0:
            raise ValueError(f"total_cycles must be positive, got {self.total_cycles}")
        if not 0 <= self.new_request_chance <= 100:
            raise ValueError(
                f"new_request_chance must be within [0, 100], got {self.new_request_chance}"
            )
        if self.initial_queue_per_server < 0:
            raise ValueError(
                f"initial_queue_per_server must be non-negative, got {self.initial_queue_per_server}"
            )
        if self.min_request_time > self.max_request_time:
            raise ValueError(
                f"min_request_time ({self.min_request_time}) > max_request_time ({self.max_request_time})"
            )

    def to_dict(self) -> Dict:
        return asdict(self)


class LoadBalancerSimulator:
    """
    Simulator cho load balancer.

    Attributes:
        policy: BalancerPolicy
        config: SimulationConfig
        generator: RequestGenerator (mặc định tạo từ config.seed)
        balancer: LoadBalancer của lần simulate() gần nhất

    Example:
        >>> sim = LoadBalancerSimulator(BalancerPolicy(), SimulationConfig(seed=42))
        >>> results = sim.simulate()
        >>> print(sim.calculate_metrics(results)['total_processed'])
    """

    def __init__(
        self,
        policy: Optional[BalancerPolicy] = None,
        config: Optional[SimulationConfig] = None,
        generator: Optional[RequestGenerator] = None
    ):
        self.policy = policy or BalancerPolicy()
        self.config = config or SimulationConfig()
        self.generator = generator or RequestGenerator.from_seed(
            self.config.seed,
            min_time=self.config.min_request_time,
            max_time=self.config.max_request_time
        )
        self.balancer: Optional[LoadBalancer] = None

    def simulate(
        self,
        num_servers: Optional[int] = None,
        total_cycles: Optional[int] = None,
        show_progress: bool = False
    ) -> pd.DataFrame:
        """
        Chạy simulation.

        Args:
            num_servers: Số servers ban đầu (mặc định: config.num_servers)
            total_cycles: Số cycles (mặc định: config.total_cycles)
            show_progress: Hiển thị tqdm progress bar

        Returns:
            DataFrame index theo cycle với các cột:
                - queue_size, servers, busy_servers, idle_servers
                - processed, rejected (cumulative)
                - action: scaling action của cycle
                - arrival: có request mới hay không
                - admitted: request mới có vào queue hay không
        """
        num_servers = self.config.num_servers if num_servers is None else num_servers
        total_cycles = self.config.total_cycles if total_cycles is None else total_cycles
        if total_cycles <= 0:
            raise ValueError(f"total_cycles must be positive, got {total_cycles}")

        balancer = LoadBalancer(num_servers, self.policy)
        self.balancer = balancer

        initial_queue_size = num_servers * self.config.initial_queue_per_server
        for item in self.generator.produce_batch(initial_queue_size):
            balancer.add_request(item)

        logger.info(
            "Initial queue of %d requests created. Starting simulation for %d cycles...",
            initial_queue_size, total_cycles
        )

        results = []
        log_interval = self.config.log_interval

        for cycle in tqdm(range(total_cycles), disable=not show_progress, desc="Simulating"):
            action = balancer.run_cycle()
            if action != ScaleAction.NONE:
                logger.debug(
                    "Cycle %d: %s -> %d servers (queue=%d)",
                    cycle, action.value, balancer.server_count, balancer.queue_size
                )

            arrival = self.generator.should_arrive(self.config.new_request_chance)
            admitted = False
            if arrival:
                admitted = balancer.admit(self.generator.produce_work_item())

            if log_interval and cycle % log_interval == 0:
                logger.info(
                    "Cycle: %d | Queue Size: %d | Active Servers: %d",
                    cycle, balancer.queue_size, balancer.server_count
                )

            snapshot = balancer.snapshot()
            results.append({
                'cycle': cycle,
                'queue_size': snapshot['queue_size'],
                'servers': snapshot['servers'],
                'busy_servers': snapshot['busy_servers'],
                'idle_servers': snapshot['idle_servers'],
                'processed': snapshot['processed'],
                'rejected': snapshot['rejected'],
                'action': action.value,
                'arrival': arrival,
                'admitted': admitted
            })

        logger.info(
            "Simulation complete. Final Queue Size: %d | Processed: %d | Servers: %d | Rejected: %d",
            balancer.queue_size, balancer.total_processed,
            balancer.server_count, balancer.rejected_count
        )

        return pd.DataFrame(results).set_index('cycle')

    def get_scaling_events(self, simulation_df: pd.DataFrame) -> pd.DataFrame:
        """
        Extract scaling events từ simulation results.

        Args:
            simulation_df: DataFrame từ simulate()

        Returns:
            DataFrame chỉ chứa các cycles có scaling action
        """
        events = simulation_df[simulation_df['action'] != 'none'].copy()
        events['server_change'] = events['action'].map({'scale_out': 1, 'scale_in': -1})
        return events

    def calculate_metrics(self, simulation_df: pd.DataFrame) -> Dict:
        """
        Tính các metrics từ simulation.

        Args:
            simulation_df: DataFrame từ simulate()

        Returns:
            Dict với các metrics, gồm bốn con số cuối cùng
            (final_queue_size, total_processed, final_servers, total_rejected)
        """
        last = simulation_df.iloc[-1]
        total_cycles = len(simulation_df)

        events = self.get_scaling_events(simulation_df)
        scale_out_count = int((events['action'] == 'scale_out').sum())
        scale_in_count = int((events['action'] == 'scale_in').sum())

        arrivals = int(simulation_df['arrival'].sum())
        total_rejected = int(last['rejected'])
        rejection_rate = total_rejected / arrivals * 100 if arrivals > 0 else 0.0

        servers = simulation_df['servers']
        utilization = (simulation_df['busy_servers'] / servers.where(servers > 0)).fillna(0.0)

        return {
            'total_cycles': total_cycles,
            'final_queue_size': int(last['queue_size']),
            'total_processed': int(last['processed']),
            'final_servers': int(last['servers']),
            'total_rejected': total_rejected,
            'avg_servers': float(servers.mean()),
            'max_servers': int(servers.max()),
            'min_servers': int(servers.min()),
            'scale_out_count': scale_out_count,
            'scale_in_count': scale_in_count,
            'total_scaling_events': scale_out_count + scale_in_count,
            'avg_queue_size': float(simulation_df['queue_size'].mean()),
            'max_queue_size': int(simulation_df['queue_size'].max()),
            'avg_utilization': float(utilization.mean()),
            'total_arrivals': arrivals,
            'rejection_rate_pct': rejection_rate,
            'throughput_per_cycle': int(last['processed']) / total_cycles
        }

    def compare_policies(
        self,
        policies: Optional[Dict[str, BalancerPolicy]] = None
    ) -> pd.DataFrame:
        """
        So sánh nhiều policies trên cùng config.

        Mỗi policy chạy với generator riêng tạo từ config.seed, nên khi seed
        cố định các policies thấy cùng chuỗi requests.

        Args:
            policies: Dict {name: BalancerPolicy}

        Returns:
            DataFrame so sánh các policies
        """
        if policies is None:
            policies = {
                'Default': self.policy,
                'Small Cap': BalancerPolicy(queue_capacity=500, scale_out_queue_length=250,
                                            scale_in_queue_length=50),
                'Wide Pool': BalancerPolicy(min_servers=2, max_servers=40),
                'Fixed Pool': BalancerPolicy(min_servers=self.config.num_servers,
                                             max_servers=self.config.num_servers)
            }

        results = []

        for name, policy in policies.items():
            logger.info("Simulating: %s...", name)

            sim = LoadBalancerSimulator(policy, self.config)
            sim_results = sim.simulate()

            metrics = sim.calculate_metrics(sim_results)
            metrics['policy'] = name
            results.append(metrics)

        df = pd.DataFrame(results)

        # Reorder columns
        cols = ['policy'] + [c for c in df.columns if c != 'policy']
        return df[cols]

    def run_sensitivity_analysis(
        self,
        param_name: str = 'queue_capacity',
        param_values: Optional[List] = None
    ) -> pd.DataFrame:
        """
        Chạy sensitivity analysis cho một tham số của BalancerPolicy.

        Args:
            param_name: Tên field của BalancerPolicy
            param_values: Các giá trị để test

        Returns:
            DataFrame với metrics cho mỗi giá trị
        """
        if param_values is None:
            if param_name == 'queue_capacity':
                param_values = [250, 500, 1000, 2000]
            elif param_name == 'scale_out_queue_length':
                param_values = [200, 350, 500, 750]
            elif param_name == 'scale_in_queue_length':
                param_values = [25, 50, 100, 150]
            elif param_name == 'max_servers':
                param_values = [10, 15, 20, 30]
            else:
                param_values = [getattr(self.policy, param_name)]

        results = []

        for value in param_values:
            logger.info("Testing %s=%s...", param_name, value)

            policy_dict = self.policy.to_dict()
            policy_dict[param_name] = value
            test_policy = BalancerPolicy(**policy_dict)

            sim = LoadBalancerSimulator(test_policy, self.config)
            metrics = sim.calculate_metrics(sim.simulate())
            metrics[param_name] = value
            results.append(metrics)

        return pd.DataFrame(results)
