"""FastAPI server exposing the training scheduler to a local front end"""

import logging
import random
import socket
import time
from contextlib import asynccontextmanager
from typing import Dict, Optional

from fastapi import FastAPI, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from uvicorn import Config, Server

from .. import __version__
from ..errors import StrategyLookupError
from ..strategy.cards import UPCARDS, deal_cards, matchup_label, parse_item_key
from ..strategy.oracle import chart
from ..trainer.scheduler import TrainingScheduler
from .auth import TokenAuth, RateLimiter, create_auth_dependency, create_rate_limit_dependency
from .schemas import (
    ChartResponse,
    ErrorResponse,
    GradeResponse,
    HealthResponse,
    ItemResponse,
    LifetimeStatsResponse,
    ModeRequest,
    ModeResponse,
    NextRequest,
    QueueEntryData,
    QueueStatsResponse,
    SessionStatsResponse,
    SkipResponse,
    SubmitRequest,
    WeakSpotData,
)


class APIServer:
    """Local API server (loopback only)"""

    def __init__(self, config: Dict, scheduler: TrainingScheduler, rng: Optional[random.Random] = None):
        self.config = config
        self.scheduler = scheduler
        self.rng = rng or random.Random()
        self.start_time = time.time()
        api_cfg = config.get('api', {}) or {}
        self.token_auth = TokenAuth(api_cfg.get('token', ''))
        self.rate_limiter = RateLimiter(
            max_requests=int(api_cfg.get('rate_limit_rps', 60)),
            window_seconds=1,
        )
        self.app = create_app(self)

    async def start(self, host: str = "127.0.0.1", port: int = 0):
        """Start the API server"""
        if port == 0:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            sock.bind((host, 0))
            port = sock.getsockname()[1]
            sock.close()

        config = Config(
            self.app,
            host=host,
            port=port,
            log_level="info",
            access_log=False
        )
        server = Server(config)
        logging.getLogger(__name__).info("Starting API server on http://%s:%d", host, port)
        await server.serve()

    def get_uptime(self) -> float:
        return time.time() - self.start_time


def create_app(api_server: APIServer) -> FastAPI:
    """Create FastAPI application"""
    scheduler = api_server.scheduler
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("API server starting up")
        yield
        logger.info("API server shutting down")

    app = FastAPI(
        title="Blackjack Coach API",
        description="Local API for basic strategy drills",
        version=__version__,
        docs_url="/docs" if api_server.config.get('debug') else None,
        redoc_url=None,
        lifespan=lifespan
    )

    auth_required = create_auth_dependency(api_server.token_auth)
    rate_limited = create_rate_limit_dependency(api_server.rate_limiter)
    protected = [Depends(auth_required), Depends(rate_limited)]

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        return response

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        return HealthResponse(
            ok=True,
            version=__version__,
            uptime_seconds=api_server.get_uptime(),
            mode=scheduler.mode.value,
        )

    @app.post("/next", response_model=ItemResponse, dependencies=protected)
    async def next_item(request: Optional[NextRequest] = None):
        """Draw the next drill (or return the one still awaiting an answer)"""
        mode = request.mode if request is not None else None
        try:
            presented = scheduler.next_item(mode)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
        item = presented.item
        return ItemResponse(
            key=item.key,
            hand_type=item.category.hand_type,
            hand_label=item.category.label,
            dealer_upcard=item.upcard.upcard_label,
            cards=deal_cards(item.category, api_server.rng),
            base_weight=item.base_weight,
            hint=presented.hint,
            available_actions=[a.value for a in presented.available_actions],
            correct_action=presented.correct_action.value,
            served_from_queue=presented.served_from_queue,
        )

    @app.post("/submit", response_model=GradeResponse, dependencies=protected)
    async def submit(request: SubmitRequest):
        result = scheduler.submit(request.action, request.response_time_ms)
        if result is None:
            raise HTTPException(status_code=409, detail="Submission rejected: no live drill or action not available")
        return GradeResponse(
            is_correct=result.is_correct,
            user_action=result.user_action.value,
            correct_action=result.correct_action.value,
            explanation=result.explanation,
            response_time_ms=result.response_time_ms,
            streak=result.streak,
            session_accuracy=result.session_accuracy,
            served_from_queue=result.served_from_queue,
            queue_transition=result.queue_transition.value,
        )

    @app.post("/skip", response_model=SkipResponse, dependencies=protected)
    async def skip():
        return SkipResponse(skipped=scheduler.skip())

    @app.put("/mode", response_model=ModeResponse, dependencies=protected)
    async def set_mode(request: ModeRequest):
        try:
            mode = scheduler.set_mode(request.mode)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
        return ModeResponse(mode=mode.value)

    @app.post("/reset", response_model=LifetimeStatsResponse, dependencies=protected)
    async def reset():
        scheduler.reset()
        return LifetimeStatsResponse(**scheduler.lifetime_stats())

    @app.get("/stats/session", response_model=SessionStatsResponse, dependencies=protected)
    async def session_stats():
        return SessionStatsResponse(**scheduler.session_stats())

    @app.get("/stats/lifetime", response_model=LifetimeStatsResponse, dependencies=protected)
    async def lifetime_stats():
        return LifetimeStatsResponse(**scheduler.lifetime_stats())

    @app.get("/weak-spots", response_model=list[WeakSpotData], dependencies=protected)
    async def get_weak_spots(min_attempts: Optional[int] = None, limit: Optional[int] = None):
        return [
            WeakSpotData(
                key=w.key,
                label=w.label,
                accuracy=w.accuracy,
                attempts=w.attempts,
                correct=w.correct,
                avg_time_s=w.avg_time_s,
            )
            for w in scheduler.weak_spots(min_attempts, limit)
        ]

    @app.get("/queue", response_model=QueueStatsResponse, dependencies=protected)
    async def queue_stats():
        stats = scheduler.queue_stats()
        return QueueStatsResponse(
            count=stats['count'],
            entries=[
                QueueEntryData(
                    key=e.item_key,
                    label=_label(e.item_key),
                    consecutive_correct=e.consecutive_correct,
                    last_shown_at=e.last_shown_at,
                    added_at=e.added_at,
                )
                for e in stats['entries']
            ],
        )

    @app.get("/chart", response_model=ChartResponse, dependencies=protected)
    async def get_chart():
        return ChartResponse(
            upcards=[u.upcard_label for u in UPCARDS],
            rows={kind: [[hand] + symbols for hand, symbols in rows] for kind, rows in chart().items()},
        )

    @app.exception_handler(StrategyLookupError)
    async def strategy_error_handler(request: Request, exc: StrategyLookupError):
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error="Strategy table mismatch", details=str(exc), code="500").model_dump()
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=str(exc.detail),
                code=str(exc.status_code)
            ).model_dump(),
            headers=getattr(exc, "headers", None),
        )

    return app


def _label(key: str) -> str:
    try:
        category, upcard = parse_item_key(key)
    except ValueError:
        return key
    return matchup_label(category, upcard)
