"""
FastAPI Application
===================
API endpoints cho Load Balancer Simulation.

Endpoints:
    - GET /health: Health check
    - GET /policy/default: Policy mặc định
    - POST /simulate: Chạy simulation, trả về các con số cuối cùng
    - POST /simulate/timeline: Chạy simulation, trả về timeline đã down-sample

Run:
    uvicorn api.main:app --reload --port 8000
"""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from dataclasses import asdict
from datetime import datetime
import logging
import numpy as np
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from api.schemas import (
    PolicySchema,
    SimulationRequest, SimulationResponse,
    TimelineRequest, TimelineResponse, TimelinePoint,
    HealthResponse
)
from lbsim import __version__
from lbsim.balancer import BalancerPolicy, LoadBalancerSimulator, SimulationConfig

logger = logging.getLogger("lbsim.api")

# =============================================================================
# App Configuration
# =============================================================================

app = FastAPI(
    title="Load Balancer Simulation API",
    description="""
    API chạy mô phỏng server farm có load balancer.

    ## Features
    - **Simulation**: Chạy N cycles với bounded queue và elastic scaling
    - **Timeline**: Queue size và số servers theo thời gian
    - **Policy**: Tuỳ chỉnh admission cap và scaling thresholds
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def build_simulator(request: SimulationRequest) -> LoadBalancerSimulator:
    """
    Tạo simulator từ request.

    Raises:
        HTTPException: 400 nếu policy/config không hợp lệ
    """
    try:
        policy = BalancerPolicy(**request.policy.model_dump())
        config = SimulationConfig(
            num_servers=request.num_servers,
            total_cycles=request.total_cycles,
            new_request_chance=request.new_request_chance,
            seed=request.seed,
            log_interval=0
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return LoadBalancerSimulator(policy, config)


# =============================================================================
# Health & Info Endpoints
# =============================================================================

@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(),
        version=__version__
    )


@app.get("/policy/default", response_model=PolicySchema, tags=["Policy"])
async def default_policy():
    """Trả về policy mặc định của load balancer."""
    return PolicySchema(**BalancerPolicy().to_dict())


# =============================================================================
# Simulation Endpoints
# =============================================================================

@app.post("/simulate", response_model=SimulationResponse, tags=["Simulation"])
def run_simulation(request: SimulationRequest):
    """
    Chạy load balancer simulation với các parameters cho trước.
    """
    simulator = build_simulator(request)

    try:
        sim_df = simulator.simulate()
        metrics = simulator.calculate_metrics(sim_df)
    except Exception as e:
        logger.exception("Simulation failed")
        raise HTTPException(status_code=500, detail=f"Simulation error: {str(e)}")

    return SimulationResponse(
        total_cycles=metrics['total_cycles'],
        final_queue_size=metrics['final_queue_size'],
        total_processed=metrics['total_processed'],
        final_servers=metrics['final_servers'],
        total_rejected=metrics['total_rejected'],
        scaling_events=metrics['total_scaling_events'],
        metrics={k: float(v) for k, v in metrics.items()}
    )


@app.post("/simulate/timeline", response_model=TimelineResponse, tags=["Simulation"])
def run_simulation_timeline(request: TimelineRequest):
    """
    Chạy simulation và trả về timeline queue size / servers đã down-sample.
    """
    simulator = build_simulator(request)

    try:
        sim_df = simulator.simulate()
    except Exception as e:
        logger.exception("Simulation failed")
        raise HTTPException(status_code=500, detail=f"Simulation error: {str(e)}")

    # Down-sample đều, luôn giữ cycle đầu và cuối
    positions = np.unique(np.linspace(0, len(sim_df) - 1, request.max_points).astype(int))
    sampled = sim_df.iloc[positions]

    points = [
        TimelinePoint(
            cycle=int(cycle),
            queue_size=int(row['queue_size']),
            servers=int(row['servers']),
            busy_servers=int(row['busy_servers']),
            processed=int(row['processed']),
            rejected=int(row['rejected'])
        )
        for cycle, row in sampled.iterrows()
    ]

    return TimelineResponse(
        total_cycles=len(sim_df),
        points=points,
        scaling_events=[asdict(e) for e in simulator.balancer.scaling_history]
    )


# =============================================================================
# Main
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
