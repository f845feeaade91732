from __future__ import annotations

import csv
import os
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from supabase import Client, create_client

from telemetry.logging_utils import get_logger

logger = get_logger(__name__)

CSV_COLUMNS = [
    "timestamp",
    "component",
    "model_or_tool",
    "format_mode",
    "tokens_in",
    "tokens_out",
    "latency_ms",
    "cost_usd",
]

# Approximate per-1K token pricing in USD.
MODEL_PRICING_PER_1K = {
    "gpt-4o": {"input": 0.005, "output": 0.015},
    "gpt-4o-mini": {"input": 0.00015, "output": 0.0006},
    "gpt-3.5-turbo": {"input": 0.0005, "output": 0.0015},
}

_csv_lock = threading.Lock()
_supabase_client: Optional[Client] = None


def metrics_csv_path() -> Path:
    base = os.getenv("METRICS_DIR") or str(Path(__file__).resolve().parent.parent / "metrics")
    return Path(base) / "generation_log.csv"


def _get_supabase_client() -> Optional[Client]:
    """Lazily initialize a Supabase client when env vars are present."""
    global _supabase_client
    if _supabase_client is not None:
        return _supabase_client
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    if not url or not key:
        return None
    try:
        _supabase_client = create_client(url, key)
    except Exception as exc:
        logger.warning("metrics_supabase_unavailable", extra={"error": str(exc)[:200]})
        _supabase_client = None
    return _supabase_client


def _ensure_csv_header(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists():
        return
    with path.open("w", newline="", encoding="utf-8") as f:
        csv.DictWriter(f, fieldnames=CSV_COLUMNS).writeheader()


def _coerce_number(value: Any) -> Optional[float]:
    try:
        if value is None or value == "":
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def estimate_openai_cost(model: Optional[str], tokens_in: Optional[int], tokens_out: Optional[int]) -> Optional[float]:
    """Rudimentary USD cost estimate using static per-1K token pricing."""
    if model is None:
        return None
    pricing = MODEL_PRICING_PER_1K.get(model.lower())
    if pricing is None:
        return None
    cost = 0.0
    if tokens_in:
        cost += (tokens_in / 1000.0) * pricing["input"]
    if tokens_out:
        cost += (tokens_out / 1000.0) * pricing["output"]
    return round(cost, 6)


def extract_usage_tokens(obj: Any) -> Tuple[Optional[int], Optional[int]]:
    """Pull prompt/completion token counts from an OpenAI response, if it reports usage."""
    usage = getattr(obj, "usage", None)
    if usage is None and isinstance(obj, dict):
        usage = obj.get("usage")
    if usage is None:
        return None, None
    if isinstance(usage, dict):
        return usage.get("prompt_tokens"), usage.get("completion_tokens")
    return getattr(usage, "prompt_tokens", None), getattr(usage, "completion_tokens", None)


def log_metric(
    component: str,
    model_or_tool: Optional[str],
    *,
    format_mode: Optional[str] = None,
    tokens_in: Optional[int] = None,
    tokens_out: Optional[int] = None,
    latency_ms: Optional[float] = None,
    cost_usd: Optional[float] = None,
) -> None:
    """Persist a metric row to CSV and Supabase (best effort)."""
    computed_cost = cost_usd if cost_usd is not None else estimate_openai_cost(model_or_tool, tokens_in, tokens_out)
    row = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "component": component,
        "model_or_tool": model_or_tool or "",
        "format_mode": format_mode,
        "tokens_in": tokens_in,
        "tokens_out": tokens_out,
        "latency_ms": round(latency_ms, 3) if latency_ms is not None else None,
        "cost_usd": computed_cost,
    }
    csv_row = {k: ("" if v is None else v) for k, v in row.items()}

    path = metrics_csv_path()
    try:
        with _csv_lock:
            _ensure_csv_header(path)
            with path.open("a", newline="", encoding="utf-8") as f:
                csv.DictWriter(f, fieldnames=CSV_COLUMNS).writerow(csv_row)
    except OSError as exc:
        logger.warning("metrics_csv_write_failed", extra={"error": str(exc)[:200]})

    client = _get_supabase_client()
    if client is not None:
        try:
            client.table("metrics").insert(row).execute()
        except Exception as exc:
            logger.warning("metrics_supabase_insert_failed", extra={"error": str(exc)[:200]})


@dataclass
class MetricTimer:
    component: str
    model_or_tool: Optional[str]
    format_mode: Optional[str] = None
    _start: float = field(default_factory=time.perf_counter)

    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self._start) * 1000

    def done(
        self,
        *,
        component: Optional[str] = None,
        model_or_tool: Optional[str] = None,
        tokens_in: Optional[int] = None,
        tokens_out: Optional[int] = None,
    ) -> None:
        log_metric(
            component or self.component,
            model_or_tool or self.model_or_tool,
            format_mode=self.format_mode,
            tokens_in=tokens_in,
            tokens_out=tokens_out,
            latency_ms=self.elapsed_ms(),
        )


def start_timer(component: str, model_or_tool: Optional[str], format_mode: Optional[str] = None) -> MetricTimer:
    """Convenience helper to measure elapsed time + submit a metric."""
    return MetricTimer(component=component, model_or_tool=model_or_tool, format_mode=format_mode)


def fetch_metrics(limit: int = 500) -> List[Dict[str, Any]]:
    """Return recent metrics from Supabase if available, otherwise from the local CSV."""
    client = _get_supabase_client()
    if client is not None:
        try:
            resp = client.table("metrics").select("*").order("timestamp", desc=True).limit(limit).execute()
            if resp.data:
                return resp.data
        except Exception as exc:
            logger.warning("metrics_supabase_fetch_failed", extra={"error": str(exc)[:200]})
    path = metrics_csv_path()
    if not path.exists():
        return []
    rows: List[Dict[str, Any]] = []
    with path.open("r", newline="", encoding="utf-8") as f:
        for idx, row in enumerate(csv.DictReader(f)):
            if idx >= limit:
                break
            rows.append(row)
    return rows


def summarize_metrics(records: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Total cost, average latency per component, and how many requests fell back offline."""
    total_cost = 0.0
    latency_by_component: Dict[str, List[float]] = {}
    counts: Dict[str, int] = {}
    for row in records:
        cost = _coerce_number(row.get("cost_usd"))
        if cost:
            total_cost += cost
        component = row.get("component") or "unknown"
        counts[component] = counts.get(component, 0) + 1
        latency = _coerce_number(row.get("latency_ms"))
        if latency is not None:
            latency_by_component.setdefault(component, []).append(latency)
    avg_latency = {comp: round(sum(vals) / len(vals), 3) for comp, vals in latency_by_component.items() if vals}
    return {
        "total_cost_usd": round(total_cost, 6),
        "average_latency_ms": avg_latency,
        "count_by_component": counts,
        "sample_size": len(records),
    }
