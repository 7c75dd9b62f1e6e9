"""
API Schemas
===========
Pydantic schemas cho FastAPI endpoints.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any
from datetime import datetime

# Giới hạn số cycles mỗi request để API không bị treo
MAX_API_CYCLES = 200_000


# =============================================================================
# Policy Schemas
# =============================================================================

class PolicySchema(BaseModel):
    """Admission cap và scaling thresholds."""
    queue_capacity: int = Field(
        default=1000,
        ge=1,
        description="Độ dài queue tối đa, request mới bị từ chối khi queue đầy"
    )
    scale_out_queue_length: int = Field(
        default=500,
        ge=0,
        description="Queue dài hơn ngưỡng này -> thêm server"
    )
    scale_in_queue_length: int = Field(
        default=100,
        ge=0,
        description="Queue ngắn hơn ngưỡng này -> bỏ một server idle"
    )
    min_servers: int = Field(
        default=5,
        ge=0,
        description="Số servers tối thiểu"
    )
    max_servers: int = Field(
        default=20,
        ge=0,
        description="Số servers tối đa"
    )


# =============================================================================
# Simulation Schemas
# =============================================================================

class SimulationRequest(BaseModel):
    """Request cho load balancer simulation."""
    num_servers: int = Field(
        default=10,
        ge=0,
        le=1000,
        description="Số servers ban đầu"
    )
    total_cycles: int = Field(
        default=10000,
        ge=1,
        le=MAX_API_CYCLES,
        description="Số clock cycles"
    )
    new_request_chance: float = Field(
        default=65,
        ge=0,
        le=100,
        description="Xác suất (%) có request mới mỗi cycle"
    )
    seed: Optional[int] = Field(
        default=None,
        description="Random seed để kết quả tái lập được"
    )
    policy: PolicySchema = Field(default_factory=PolicySchema)

    class Config:
        json_schema_extra = {
            "example": {
                "num_servers": 10,
                "total_cycles": 10000,
                "new_request_chance": 65,
                "seed": 42,
                "policy": {
                    "queue_capacity": 1000,
                    "scale_out_queue_length": 500,
                    "scale_in_queue_length": 100,
                    "min_servers": 5,
                    "max_servers": 20
                }
            }
        }


class SimulationResponse(BaseModel):
    """Response cho load balancer simulation."""
    total_cycles: int
    final_queue_size: int
    total_processed: int
    final_servers: int
    total_rejected: int
    scaling_events: int
    metrics: Dict[str, float]


class TimelineRequest(SimulationRequest):
    """Simulation request kèm số điểm timeline muốn nhận."""
    max_points: int = Field(
        default=500,
        ge=2,
        le=5000,
        description="Số điểm tối đa của timeline (down-sample đều)"
    )


class TimelinePoint(BaseModel):
    """Snapshot tại một cycle."""
    cycle: int
    queue_size: int
    servers: int
    busy_servers: int
    processed: int
    rejected: int


class TimelineResponse(BaseModel):
    """Response cho timeline endpoint."""
    total_cycles: int
    points: List[TimelinePoint]
    scaling_events: List[Dict[str, Any]]


# =============================================================================
# Health Schemas
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    timestamp: datetime
    version: str
