"""
Test Simulator Module
=====================
Unit tests cho RequestGenerator, SimulationConfig và LoadBalancerSimulator.
"""

import logging
import re

import pytest
import pandas as pd
import numpy as np
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lbsim.balancer import BalancerPolicy, LoadBalancerSimulator, SimulationConfig, WorkItem
from lbsim.traffic import RequestGenerator


class TestRequestGenerator:
    """Test cases cho RequestGenerator."""

    def test_ip_format(self):
        generator = RequestGenerator.from_seed(1)

        for _ in range(50):
            ip = generator.generate_ip()
            assert re.fullmatch(r"\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}", ip)
            assert all(0 <= int(octet) <= 255 for octet in ip.split('.'))

    def test_duration_range(self):
        """Processing time nằm trong [10, 19] mặc định."""
        generator = RequestGenerator.from_seed(2)
        durations = [generator.produce_work_item().duration for _ in range(500)]

        assert min(durations) >= 10
        assert max(durations) <= 19

    def test_custom_duration_range(self):
        generator = RequestGenerator.from_seed(3, min_time=1, max_time=1)
        assert all(item.duration == 1 for item in generator.produce_batch(20))

    def test_produces_work_items(self):
        item = RequestGenerator.from_seed(4).produce_work_item()
        assert isinstance(item, WorkItem)

    def test_seed_reproducibility(self):
        first = RequestGenerator.from_seed(42).produce_batch(10)
        second = RequestGenerator.from_seed(42).produce_batch(10)
        assert first == second

    def test_injected_rng(self):
        rng = np.random.default_rng(5)
        generator = RequestGenerator(rng=rng)
        assert generator.rng is rng

    def test_should_arrive_bounds(self):
        generator = RequestGenerator.from_seed(6)
        assert not any(generator.should_arrive(0) for _ in range(200))
        assert all(generator.should_arrive(100) for _ in range(200))

    def test_invalid_range(self):
        with pytest.raises(ValueError):
            RequestGenerator(min_time=20, max_time=10)


class TestSimulationConfig:
    """Test cases cho SimulationConfig."""

    def test_default_config(self):
        config = SimulationConfig()

        assert config.num_servers == 10
        assert config.total_cycles == 10000
        assert config.new_request_chance == 65
        assert config.initial_queue_per_server == 100
        assert config.log_interval == 1000

    @pytest.mark.parametrize("kwargs", [
        {'num_servers': -1},
        {'total_cycles': 0},
        {'new_request_chance': 101},
        {'new_request_chance': -5},
        {'initial_queue_per_server': -1},
        {'min_request_time': 30, 'max_request_time': 10},
    ])
    def test_invalid_config(self, kwargs):
        with pytest.raises(ValueError):
            SimulationConfig(**kwargs)


class TestLoadBalancerSimulator:
    """Test cases cho LoadBalancerSimulator."""

    @pytest.fixture
    def simulator(self):
        """Simulator nhỏ với seed cố định."""
        config = SimulationConfig(num_servers=5, total_cycles=600, seed=11, log_interval=0)
        return LoadBalancerSimulator(BalancerPolicy(), config)

    def test_result_shape(self, simulator):
        results = simulator.simulate()

        assert len(results) == 600
        assert results.index.name == 'cycle'
        for col in ['queue_size', 'servers', 'busy_servers', 'idle_servers',
                    'processed', 'rejected', 'action', 'arrival', 'admitted']:
            assert col in results.columns

    def test_per_cycle_invariants(self, simulator):
        results = simulator.simulate()

        assert (results['busy_servers'] + results['idle_servers'] == results['servers']).all()
        assert results['processed'].is_monotonic_increasing
        assert results['rejected'].is_monotonic_increasing
        assert results['servers'].between(5, 20).all()

    def test_final_figures_match_balancer(self, simulator):
        results = simulator.simulate()
        metrics = simulator.calculate_metrics(results)
        balancer = simulator.balancer

        assert metrics['final_queue_size'] == balancer.queue_size
        assert metrics['total_processed'] == balancer.total_processed
        assert metrics['final_servers'] == balancer.server_count
        assert metrics['total_rejected'] == balancer.rejected_count
        assert metrics['total_cycles'] == 600
        assert balancer.clock == 600

    def test_initial_backlog_triggers_scale_out(self, simulator):
        """Backlog 500 (5 x 100) + arrivals -> queue > 500 -> scale out."""
        results = simulator.simulate()
        events = simulator.get_scaling_events(results)

        assert (events['action'] == 'scale_out').any()
        assert set(events['server_change'].unique()) <= {1, -1}

    def test_reproducible_with_seed(self):
        config = SimulationConfig(num_servers=3, total_cycles=300, seed=99, log_interval=0)

        first = LoadBalancerSimulator(config=config).simulate()
        second = LoadBalancerSimulator(config=config).simulate()

        pd.testing.assert_frame_equal(first, second)

    def test_no_arrivals(self):
        config = SimulationConfig(num_servers=2, total_cycles=200, new_request_chance=0,
                                  initial_queue_per_server=5, seed=1, log_interval=0)
        sim = LoadBalancerSimulator(BalancerPolicy(min_servers=1, max_servers=4), config)
        metrics = sim.calculate_metrics(sim.simulate())

        assert metrics['total_arrivals'] == 0
        assert metrics['total_rejected'] == 0
        assert metrics['rejection_rate_pct'] == 0.0
        assert metrics['total_processed'] == 10
        assert metrics['final_queue_size'] == 0

    def test_full_queue_rejects_every_arrival(self):
        """Backlog lớn hơn capacity và pool cố định 1 server: mọi arrival bị từ chối."""
        policy = BalancerPolicy(queue_capacity=50, scale_out_queue_length=40,
                                scale_in_queue_length=10, min_servers=1, max_servers=1)
        config = SimulationConfig(num_servers=1, total_cycles=100, new_request_chance=100,
                                  initial_queue_per_server=100, seed=3, log_interval=0)
        sim = LoadBalancerSimulator(policy, config)
        results = sim.simulate()
        metrics = sim.calculate_metrics(results)

        assert metrics['total_arrivals'] == 100
        assert metrics['total_rejected'] == 100
        assert metrics['rejection_rate_pct'] == 100.0
        assert not results['admitted'].any()
        assert (results['servers'] == 1).all()

    def test_override_servers_and_cycles(self, simulator):
        results = simulator.simulate(num_servers=8, total_cycles=50)

        assert len(results) == 50
        assert results['servers'].iloc[0] >= 8

    def test_invalid_cycles_override(self, simulator):
        with pytest.raises(ValueError):
            simulator.simulate(total_cycles=0)

    def test_metrics_keys(self, simulator):
        metrics = simulator.calculate_metrics(simulator.simulate())

        for key in ['avg_servers', 'max_servers', 'min_servers', 'scale_out_count',
                    'scale_in_count', 'avg_queue_size', 'avg_utilization',
                    'throughput_per_cycle']:
            assert key in metrics
        assert 0.0 <= metrics['avg_utilization'] <= 1.0

    def test_progress_logging(self, caplog):
        config = SimulationConfig(num_servers=5, total_cycles=250, seed=2, log_interval=100)
        sim = LoadBalancerSimulator(config=config)

        with caplog.at_level(logging.INFO, logger="lbsim"):
            sim.simulate()

        progress = [r.getMessage() for r in caplog.records if r.getMessage().startswith("Cycle: ")]
        assert len(progress) == 3  # cycles 0, 100, 200
        assert "Queue Size:" in progress[0]
        assert any("Simulation complete" in r.getMessage() for r in caplog.records)

    def test_compare_policies(self):
        config = SimulationConfig(num_servers=5, total_cycles=200, seed=8, log_interval=0)
        sim = LoadBalancerSimulator(config=config)

        comparison = sim.compare_policies()

        assert list(comparison['policy']) == ['Default', 'Small Cap', 'Wide Pool', 'Fixed Pool']
        assert comparison.columns[0] == 'policy'
        fixed = comparison[comparison['policy'] == 'Fixed Pool'].iloc[0]
        assert fixed['max_servers'] == 5
        assert fixed['min_servers'] == 5

    def test_sensitivity_analysis(self):
        config = SimulationConfig(num_servers=5, total_cycles=200, seed=8, log_interval=0)
        sim = LoadBalancerSimulator(config=config)

        results = sim.run_sensitivity_analysis('queue_capacity', [100, 1000])

        assert list(results['queue_capacity']) == [100, 1000]
        assert len(results) == 2
