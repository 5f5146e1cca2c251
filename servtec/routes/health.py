"""
Health endpoints

- GET /api/v1/health               liveness, version, uptime, scheduler flag
- GET /api/v1/health/dependencies  probes the bot's own ticket store and
                                   chat gateway, cached per app for 30s
"""
import asyncio
import time
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, List, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from servtec import __version__
from servtec.repositories.base_repository import TicketStore
from servtec.services.bot import BotController
from servtec.services.whatsapp import Notifier
from servtec.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/health", tags=["health"])

STARTED_AT = time.time()
PROBE_TIMEOUT_SECONDS = 5.0
CACHE_TTL_SECONDS = 30.0
GATEWAY_CONNECTED = "WORKING"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class HealthResponse(BaseModel):
    """Liveness answer; never touches external services"""
    status: str = "healthy"
    timestamp: datetime = Field(default_factory=_now)
    version: str
    uptime_seconds: float
    scheduler_running: bool = False


class ProbeResult(BaseModel):
    """
    Outcome of one dependency probe.

    Attributes:
        name: store | gateway
        status: healthy | degraded | unhealthy
        latency_ms: Round-trip time when the probe got an answer
        detail: Failure reason or extra state
    """
    name: str
    status: str
    latency_ms: Optional[float] = None
    detail: Optional[str] = None


class DependencyReport(BaseModel):
    overall_status: str
    dependencies: Dict[str, ProbeResult]
    checked_at: datetime = Field(default_factory=_now)


async def _probe(name: str, call: Callable[[], Awaitable[Optional[str]]]) -> ProbeResult:
    """
    Time a probe coroutine.

    The coroutine returns None when healthy or a string describing a degraded
    state; any exception or a timeout makes the dependency unhealthy.
    """
    start = time.time()
    try:
        degraded = await asyncio.wait_for(call(), timeout=PROBE_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        logger.error(f"Health probe '{name}' timed out")
        return ProbeResult(
            name=name,
            status="unhealthy",
            detail=f"No answer within {PROBE_TIMEOUT_SECONDS:.0f}s",
        )
    except Exception as e:
        logger.error(f"Health probe '{name}' failed: {e}")
        return ProbeResult(name=name, status="unhealthy", detail=str(e))

    latency = round((time.time() - start) * 1000, 2)
    if degraded:
        return ProbeResult(name=name, status="degraded", latency_ms=latency, detail=degraded)
    return ProbeResult(name=name, status="healthy", latency_ms=latency)


async def probe_store(store: TicketStore) -> ProbeResult:
    """Read the equipment catalog; an empty catalog only degrades resolution"""

    async def call() -> Optional[str]:
        catalog = await asyncio.to_thread(store.query_catalog)
        return None if catalog else "Equipment catalog is empty"

    return await _probe("store", call)


async def probe_gateway(notifier: Notifier) -> ProbeResult:
    """Ask the chat gateway for its session state"""
    session_status = getattr(notifier, "session_status", None)
    if session_status is None:
        return ProbeResult(name="gateway", status="healthy", detail="In-process notifier")

    async def call() -> Optional[str]:
        state = await session_status()
        return None if state == GATEWAY_CONNECTED else f"Session status: {state}"

    return await _probe("gateway", call)


def determine_overall_status(results: List[ProbeResult]) -> str:
    """
    Without the store no ticket can be created or updated: unhealthy.
    Any other problem only degrades the bot.
    """
    by_name = {r.name: r for r in results}
    if "store" in by_name and by_name["store"].status == "unhealthy":
        return "unhealthy"
    if any(r.status != "healthy" for r in results):
        return "degraded"
    return "healthy"


async def check_dependencies(bot: BotController) -> DependencyReport:
    results = await asyncio.gather(
        probe_store(bot.intake.store),
        probe_gateway(bot.intake.notifier),
    )
    report = DependencyReport(
        overall_status=determine_overall_status(list(results)),
        dependencies={r.name: r for r in results},
    )

    failing = [r.name for r in results if r.status != "healthy"]
    if failing:
        logger.warning(f"Dependency health {report.overall_status}: {', '.join(failing)}")
    return report


@router.get("", response_model=HealthResponse)
async def basic_health_check(request: Request) -> HealthResponse:
    """Always 200; does not check external dependencies"""
    bot = getattr(request.app.state, "bot", None)
    scheduler = getattr(bot, "scheduler", None)

    return HealthResponse(
        version=__version__,
        uptime_seconds=round(time.time() - STARTED_AT, 2),
        scheduler_running=bool(getattr(scheduler, "running", False)),
    )


@router.get("/dependencies", response_model=DependencyReport)
async def dependency_health_check(request: Request) -> DependencyReport:
    """
    Probe the ticket store and the chat gateway.

    Results are cached on the app for 30 seconds so monitors polling this
    endpoint do not hammer Supabase or the gateway.
    """
    state = request.app.state
    cached = getattr(state, "health_cache", None)
    if cached is not None and time.time() - cached[0] < CACHE_TTL_SECONDS:
        return cached[1]

    bot = getattr(state, "bot", None)
    if bot is None:
        report = DependencyReport(
            overall_status="unhealthy",
            dependencies={
                "store": ProbeResult(name="store", status="unhealthy", detail="Bot not initialized")
            },
        )
    else:
        report = await check_dependencies(bot)

    state.health_cache = (time.time(), report)
    return report
