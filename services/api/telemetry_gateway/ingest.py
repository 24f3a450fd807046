"""Ingestion orchestrator: gate the vessel, classify every signal, persist both partitions."""
import logging
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional, Protocol

from .gate import VesselActiveCheck, admit
from .registry import SignalRegistry
from .schemas import TelemetryPayload
from .validation import Accepted, classify

log = logging.getLogger("ingest")

RFC3339 = re.compile(
    r"^(\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2})(\.\d+)?([Zz]|[+-]\d{2}:\d{2})\Z")


class IngestError(Exception):
    status_code = 500
    detail = "Internal Server Error"


class MalformedInput(IngestError):
    status_code = 400
    detail = "Invalid timestampUTC"


class VesselNotPermitted(IngestError):
    status_code = 403
    detail = "Unknown or inactive vessel"


class PersistenceFailure(IngestError):
    status_code = 500
    detail = "Internal Server Error"


@dataclass(frozen=True)
class AcceptedRow:
    vessel_id: str
    timestamp: datetime
    signal_name: str
    value: float


@dataclass(frozen=True)
class RejectedRow:
    vessel_id: str
    timestamp: datetime
    signal_name: str
    value: Optional[float]
    reason: str


@dataclass(frozen=True)
class MetricsRow:
    vessel_id: str
    validation_ms: int
    ingestion_ms: int
    total_ms: int


@dataclass
class IngestionSummary:
    vessel_id: str
    accepted_count: int
    validation_ms: int
    ingestion_ms: int
    total_ms: int
    accepted: List[AcceptedRow] = field(default_factory=list)
    rejected: List[RejectedRow] = field(default_factory=list)


class TelemetryStore(Protocol):
    def vessel_is_active(self, vessel_id: str) -> bool: ...

    def write_signals(self, accepted: List[AcceptedRow], rejected: List[RejectedRow]) -> None: ...

    def write_metrics(self, row: MetricsRow) -> None: ...


def parse_timestamp(value: str) -> datetime:
    match = RFC3339.match(value) if isinstance(value, str) else None
    if match is None:
        raise MalformedInput(f"timestampUTC is not RFC 3339: {value!r}")
    head, fraction, offset = match.groups()
    # fromisoformat before 3.11 only takes 3 or 6 fraction digits
    micros = "." + fraction[1:7].ljust(6, "0") if fraction else ""
    offset = "+00:00" if offset in ("Z", "z") else offset
    try:
        ts = datetime.fromisoformat(head.replace("t", "T") + micros + offset)
    except ValueError as exc:
        raise MalformedInput(f"timestampUTC is not a valid date-time: {value!r}") from exc
    return ts.astimezone(timezone.utc)


def _elapsed_ms(clock: Callable[[], float], since: float) -> int:
    return max(0, int((clock() - since) * 1000))


def partition(payload: TelemetryPayload, ts: datetime, registry: SignalRegistry):
    """Classify every signal in payload and split the results into accepted and rejected rows."""
    accepted: List[AcceptedRow] = []
    rejected: List[RejectedRow] = []
    for name, raw in payload.signals.items():
        definition = registry.lookup(name)
        if definition is None:
            log.debug(f"Unknown signal {name} from vessel {payload.vessel_id}")
        outcome = classify(definition, raw)
        if isinstance(outcome, Accepted):
            accepted.append(AcceptedRow(payload.vessel_id, ts, name, outcome.value))
        else:
            rejected.append(RejectedRow(
                payload.vessel_id, ts, name, outcome.value, outcome.reason.value))
    return accepted, rejected


def ingest(payload: TelemetryPayload,
           registry: SignalRegistry,
           is_active: VesselActiveCheck,
           store: TelemetryStore,
           clock: Callable[[], float] = time.perf_counter) -> IngestionSummary:
    t0 = clock()
    vessel_id = payload.vessel_id

    ts = parse_timestamp(payload.timestamp_utc)

    try:
        permitted = admit(vessel_id, is_active)
    except Exception as exc:
        raise PersistenceFailure(f"vessel lookup failed for {vessel_id}") from exc
    if not permitted:
        raise VesselNotPermitted(f"vessel {vessel_id!r} is unknown or inactive")

    t_val = clock()
    accepted, rejected = partition(payload, ts, registry)
    validation_ms = _elapsed_ms(clock, t_val)

    t_ing = clock()
    try:
        store.write_signals(accepted, rejected)
    except Exception as exc:
        raise PersistenceFailure(f"writing signals failed for {vessel_id}") from exc
    ingestion_ms = _elapsed_ms(clock, t_ing)

    metrics = MetricsRow(vessel_id, validation_ms, ingestion_ms, _elapsed_ms(clock, t0))
    try:
        store.write_metrics(metrics)
    except Exception as exc:
        raise PersistenceFailure(f"writing metrics failed for {vessel_id}") from exc
    total_ms = _elapsed_ms(clock, t0)

    log.info(
        f"Telemetry ingested vessel_id={vessel_id} valid={len(accepted)} rejected={len(rejected)} "
        f"validation_ms={validation_ms} ingestion_ms={ingestion_ms} total_ms={total_ms}")
    return IngestionSummary(
        vessel_id=vessel_id,
        accepted_count=len(accepted),
        validation_ms=validation_ms,
        ingestion_ms=ingestion_ms,
        total_ms=total_ms,
        accepted=accepted,
        rejected=rejected,
    )
