import logging
import time
from collections import Counter as Tally

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

from . import config, db
from .auth import require_bearer
from .ingest import IngestError, PersistenceFailure, ingest
from .schemas import IngestResponse, TelemetryPayload

logging.basicConfig(level=config.LOG_LEVEL)
log = logging.getLogger("api")

app = FastAPI(title="Vessel Telemetry Gateway", version="0.1.0")

REQS = Counter("requests_total", "Total requests", ["route", "status"])
SIGNALS = Counter("signals_total", "Signals by outcome", ["outcome"])
E2E = Histogram("e2e_latency_ms", "End-to-end latency (ms)",
                buckets=(1, 2, 3, 5, 8, 13, 21, 34, 55, 89))
VAL = Histogram("validation_latency_ms", "Signal validation latency (ms)",
                buckets=(1, 2, 3, 5, 8, 13, 21, 34))
ING = Histogram("ingestion_latency_ms", "Row ingestion latency (ms)",
                buckets=(1, 2, 3, 5, 8, 13, 21, 34, 55, 89))

ROUTE = "/api/v1/telemetry"


@app.on_event("startup")
def _startup():
    if not config.API_TOKEN.strip():
        raise RuntimeError("API_TOKEN must not be empty")
    app.state.api_token = config.API_TOKEN
    db.pool.open(wait=True)
    if config.ENSURE_SCHEMA:
        db.ensure_schema()
        log.info("Schema ensured")
    registry = db.load_signal_registry()
    log.info(f"Loaded signal registry count={len(registry)} kinds={registry.kind_counts()}")
    app.state.registry = registry
    app.state.store = db.PostgresStore(db.pool)


@app.on_event("shutdown")
def _shutdown():
    db.pool.close()
    log.info("Shutdown complete")


@app.middleware("http")
async def _count_requests(request: Request, call_next):
    if request.url.path != ROUTE:
        return await call_next(request)
    t0 = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        log.exception("Unhandled error on ingest route")
        REQS.labels(ROUTE, "500").inc()
        raise
    finally:
        E2E.observe((time.perf_counter() - t0) * 1000)
    REQS.labels(ROUTE, str(response.status_code)).inc()
    return response


@app.exception_handler(IngestError)
async def _ingest_error(request: Request, exc: IngestError):
    if isinstance(exc, PersistenceFailure):
        log.error(f"Internal error: {exc}", exc_info=exc.__cause__ or exc)
    else:
        log.warning(f"Rejected request: {exc}")
    return PlainTextResponse(exc.detail, status_code=exc.status_code)


@app.get("/healthz")
def healthz():
    if db.ping():
        return {"status": "ok", "db": "up"}
    return JSONResponse({"status": "degraded", "db": "down"}, status_code=503)


@app.get("/metrics")
async def metrics():
    return PlainTextResponse(generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.post(ROUTE, dependencies=[Depends(require_bearer)], response_model=IngestResponse, response_model_by_alias=True)
def ingest_telemetry(payload: TelemetryPayload, request: Request):
    store = request.app.state.store
    summary = ingest(payload, request.app.state.registry, store.vessel_is_active, store)

    VAL.observe(summary.validation_ms)
    ING.observe(summary.ingestion_ms)
    SIGNALS.labels("accepted").inc(summary.accepted_count)
    for reason, n in Tally(r.reason for r in summary.rejected).items():
        SIGNALS.labels(reason).inc(n)

    return IngestResponse(
        vessel_id=summary.vessel_id,
        valid_signals=summary.accepted_count,
        validation_ms=summary.validation_ms,
        ingestion_ms=summary.ingestion_ms,
        total_ms=summary.total_ms,
    )
