"""
Streamlit Dashboard
===================
Dashboard cho Load Balancer Simulation:
    - Sidebar: cấu hình simulation và policy
    - KPIs: các con số cuối cùng của lần chạy
    - Timeline: queue size, số servers, busy servers theo cycle
    - Scaling events

Run:
    streamlit run dashboard/app.py
"""

import streamlit as st
import pandas as pd
import plotly.graph_objects as go
from plotly.subplots import make_subplots
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lbsim.balancer import BalancerPolicy, LoadBalancerSimulator, SimulationConfig

# Page config
st.set_page_config(
    page_title="Load Balancer Simulation",
    page_icon="⚖️",
    layout="wide",
    initial_sidebar_state="expanded"
)

# =============================================================================
# Simulation
# =============================================================================

@st.cache_data
def run_simulation(config_values: dict, policy_values: dict):
    """Chạy simulation, cache theo config và policy."""
    simulator = LoadBalancerSimulator(
        BalancerPolicy(**policy_values),
        SimulationConfig(**config_values, log_interval=0)
    )
    sim_df = simulator.simulate()
    return sim_df, simulator.calculate_metrics(sim_df), simulator.balancer.get_scaling_history()


# =============================================================================
# Helper Functions
# =============================================================================

def format_number(num):
    """Format number với comma separator."""
    if num >= 1_000_000:
        return f"{num/1_000_000:.2f}M"
    elif num >= 1_000:
        return f"{num/1_000:.1f}K"
    return str(int(num))


def render_sidebar():
    """Render sidebar, trả về (config_values, policy_values)."""
    st.sidebar.title("⚖️ Load Balancer")
    st.sidebar.markdown("---")

    st.sidebar.subheader("Simulation")
    num_servers = st.sidebar.number_input("Initial Servers", min_value=0, max_value=100, value=10)
    total_cycles = st.sidebar.number_input("Clock Cycles", min_value=100, max_value=200_000, value=10_000, step=1000)
    chance = st.sidebar.slider(
        "New Request Chance (%)",
        min_value=0,
        max_value=100,
        value=65,
        help="Xác suất có request mới mỗi cycle"
    )
    seed = st.sidebar.number_input("Seed", min_value=0, value=42)

    st.sidebar.subheader("Policy")
    queue_capacity = st.sidebar.number_input("Queue Capacity", min_value=1, value=1000, step=100)
    scale_out = st.sidebar.number_input("Scale Out Queue Length", min_value=1, value=500, step=50)
    scale_in = st.sidebar.number_input("Scale In Queue Length", min_value=0, value=100, step=10)
    min_servers, max_servers = st.sidebar.slider("Server Bounds", min_value=0, max_value=100, value=(5, 20))

    config_values = dict(
        num_servers=int(num_servers),
        total_cycles=int(total_cycles),
        new_request_chance=float(chance),
        seed=int(seed)
    )
    policy_values = dict(
        queue_capacity=int(queue_capacity),
        scale_out_queue_length=int(scale_out),
        scale_in_queue_length=int(scale_in),
        min_servers=int(min_servers),
        max_servers=int(max_servers)
    )
    return config_values, policy_values


def render_results(sim_df: pd.DataFrame, metrics: dict, history: pd.DataFrame):
    """Render KPIs, timeline và scaling events."""
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Final Queue Size", format_number(metrics['final_queue_size']))
    with col2:
        st.metric("Processed", format_number(metrics['total_processed']))
    with col3:
        st.metric("Servers", metrics['final_servers'])
    with col4:
        st.metric("Rejected", format_number(metrics['total_rejected']))

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Avg Utilization", f"{metrics['avg_utilization']:.1%}")
    with col2:
        st.metric("Scaling Events", metrics['total_scaling_events'])
    with col3:
        st.metric("Rejection Rate", f"{metrics['rejection_rate_pct']:.2f}%")

    # Timeline plot
    fig = make_subplots(
        rows=2, cols=1,
        shared_xaxes=True,
        subplot_titles=("Queue Size", "Server Pool")
    )

    fig.add_trace(
        go.Scatter(x=sim_df.index, y=sim_df['queue_size'].values, name="Queue", line=dict(color='blue')),
        row=1, col=1
    )
    fig.add_trace(
        go.Scatter(x=sim_df.index, y=sim_df['servers'].values, name="Servers", line=dict(color='orange')),
        row=2, col=1
    )
    fig.add_trace(
        go.Scatter(x=sim_df.index, y=sim_df['busy_servers'].values, name="Busy", line=dict(color='green')),
        row=2, col=1
    )

    fig.update_layout(height=600)
    st.plotly_chart(fig, use_container_width=True)

    st.subheader("Scaling Events")
    if len(history) == 0:
        st.info("Không có scaling event nào.")
    else:
        st.dataframe(history, use_container_width=True)


# =============================================================================
# Main App
# =============================================================================

def main():
    """Main application."""
    st.header("⚖️ Load Balancer Simulation")

    config_values, policy_values = render_sidebar()

    try:
        sim_df, metrics, history = run_simulation(config_values, policy_values)
    except ValueError as e:
        st.error(f"Invalid configuration: {e}")
        return

    render_results(sim_df, metrics, history)


if __name__ == "__main__":
    main()
