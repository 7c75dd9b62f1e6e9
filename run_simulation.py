"""
Load balancer simulation script.
Runs the server farm for a number of clock cycles and prints the final figures.

Run:
    python run_simulation.py --servers 10 --cycles 10000 --seed 42
    python run_simulation.py            # prompts for servers and cycles
"""
import argparse
import logging
import sys
import os

# Add project root to path
SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, SCRIPT_DIR)

from lbsim.balancer import BalancerPolicy, LoadBalancerSimulator, SimulationConfig
from lbsim.logging_config import (
    LOGGER_NAME,
    configure_from_env,
    disable_logging,
    enable_console_logging,
    enable_file_logging,
    set_level
)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run load balancer simulation")
    parser.add_argument("--servers", type=int, default=None, help="Number of web servers")
    parser.add_argument("--cycles", type=int, default=None, help="Total simulation clock cycles")
    parser.add_argument("--chance", type=float, default=65, help="Percent chance of a new request per cycle (default: 65)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--queue-capacity", type=int, default=1000, help="Admission cap of the request queue (default: 1000)")
    parser.add_argument("--scale-out", type=int, default=500, help="Add a server when the queue is longer than this (default: 500)")
    parser.add_argument("--scale-in", type=int, default=100, help="Remove an idle server when the queue is shorter than this (default: 100)")
    parser.add_argument("--min-servers", type=int, default=5, help="Lower bound of the server pool (default: 5)")
    parser.add_argument("--max-servers", type=int, default=20, help="Upper bound of the server pool (default: 20)")
    parser.add_argument("--log-file", type=str, default=None, help="Write the simulation log to this file")
    parser.add_argument("--progress", action="store_true", help="Show a progress bar")
    parser.add_argument("--verbose", action="store_true", help="Log scaling events")
    return parser.parse_args(argv)


def prompt_int(message):
    while True:
        try:
            return int(input(message))
        except ValueError:
            print("Please enter a whole number.")


def setup_logging(args):
    # Environment settings win; the console handler is only the fallback
    if configure_from_env():
        if args.verbose:
            set_level("DEBUG")
        level = logging.getLogger(LOGGER_NAME).level
    else:
        level = "DEBUG" if args.verbose else "INFO"
        enable_console_logging(level=level)

    if args.log_file:
        enable_file_logging(args.log_file, level=level)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args)

    try:
        return run(args)
    finally:
        disable_logging()


def run(args):
    try:
        num_servers = args.servers if args.servers is not None else prompt_int("Enter number of web servers: ")
        total_cycles = args.cycles if args.cycles is not None else prompt_int("Enter total simulation clock cycles: ")
    except EOFError:
        print("\nNo input: pass --servers and --cycles when stdin is not interactive.")
        return 2

    try:
        config = SimulationConfig(
            num_servers=num_servers,
            total_cycles=total_cycles,
            new_request_chance=args.chance,
            seed=args.seed
        )
        policy = BalancerPolicy(
            queue_capacity=args.queue_capacity,
            scale_out_queue_length=args.scale_out,
            scale_in_queue_length=args.scale_in,
            min_servers=args.min_servers,
            max_servers=args.max_servers
        )
    except ValueError as e:
        print(f"Invalid configuration: {e}")
        return 2

    simulator = LoadBalancerSimulator(policy, config)

    print(f"\nInitial queue of {num_servers * config.initial_queue_per_server} requests created.")
    print(f"Starting simulation for {total_cycles} cycles...\n")

    results = simulator.simulate(show_progress=args.progress)
    metrics = simulator.calculate_metrics(results)

    print("\nSimulation complete.")
    print(f"Final Queue Size: {metrics['final_queue_size']}")
    print(f"Total Requests Processed: {metrics['total_processed']}")
    print(f"Number of Servers: {metrics['final_servers']}")
    print(f"Total Requests Rejected: {metrics['total_rejected']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
