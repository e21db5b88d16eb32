"""API request/response schemas"""

from pydantic import BaseModel, Field
from typing import List, Dict, Optional


class NextRequest(BaseModel):
    """Request for the next drill"""
    mode: Optional[str] = Field(None, description="critical, hard, balanced or random")


class ItemResponse(BaseModel):
    """A drill awaiting an answer"""
    key: str
    hand_type: str
    hand_label: str
    dealer_upcard: str
    cards: List[str]
    base_weight: int
    hint: Optional[str] = None
    available_actions: List[str]
    correct_action: str
    served_from_queue: bool


class SubmitRequest(BaseModel):
    """Answer for the live drill"""
    action: str = Field(..., min_length=1, max_length=10, description="H, S, D, P, R or the action name")
    response_time_ms: Optional[int] = Field(None, ge=0)


class GradeResponse(BaseModel):
    """Grading outcome"""
    is_correct: bool
    user_action: str
    correct_action: str
    explanation: str
    response_time_ms: int
    streak: int
    session_accuracy: float
    served_from_queue: bool
    queue_transition: str


class ModeRequest(BaseModel):
    mode: str


class ModeResponse(BaseModel):
    mode: str


class SkipResponse(BaseModel):
    skipped: bool


class SessionStatsResponse(BaseModel):
    total: int
    correct: int
    accuracy: float
    streak: int
    best_streak: int


class LifetimeStatsResponse(BaseModel):
    total_hands: int
    total_correct: int
    accuracy: float
    best_streak: int


class WeakSpotData(BaseModel):
    key: str
    label: str
    accuracy: float
    attempts: int
    correct: int
    avg_time_s: float


class QueueEntryData(BaseModel):
    key: str
    label: str
    consecutive_correct: int
    last_shown_at: int
    added_at: int


class QueueStatsResponse(BaseModel):
    count: int
    entries: List[QueueEntryData]


class ChartResponse(BaseModel):
    """Strategy chart rows keyed by hand type"""
    upcards: List[str]
    rows: Dict[str, List[List[str]]]


class HealthResponse(BaseModel):
    """Health check response"""
    ok: bool
    version: str
    uptime_seconds: float
    mode: str


class ErrorResponse(BaseModel):
    """Error response"""
    error: str
    details: Optional[str] = None
    code: Optional[str] = None
