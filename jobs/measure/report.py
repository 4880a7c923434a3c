"""Report collaborators: console summary and CSV / JSON / HTML files.

Consumes the engine outcome; the engine itself never touches files.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd
from pydantic import BaseModel, Field

from latency_measure.breakdown import tree_label
from latency_measure.engine import MeasureOutcome
from latency_measure.metrics.models import GlobalAggregate

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y%m%d%H%M%S"

RAW_CSV_NAME = "raw_ksvc_creation_time.csv"
CSV_NAME = "ksvc_creation_time.csv"
JSON_NAME = "ksvc_creation_time.json"
HTML_NAME = "ksvc_creation_time.html"

# (stage, label, indent level) for the console tree
_SUMMARY_TREE = (
    ("configuration_ready", "Service Configuration Duration", 0),
    ("revision_ready", "Service Revision Duration", 1),
    ("deployment_created", "Service Deployment Created Duration", 2),
    ("pod_scheduled", "Service Pod Scheduled Duration", 3),
    ("containers_ready", "Service Pod Containers Ready Duration", 3),
    ("queue_proxy_started", "Service Pod queue-proxy Started Duration", 4),
    ("user_container_started", "Service Pod user-container Started Duration", 4),
    ("autoscaler_active", "Service PodAutoscaler Active Duration", 2),
    ("mesh_ready", "Service ServerlessService Ready Duration", 3),
    ("mesh_activator_endpoints_populated", "Service ServerlessService ActivatorEndpointsPopulated Duration", 4),
    ("mesh_endpoints_populated", "Service ServerlessService EndpointsPopulated Duration", 4),
    ("routes_ready", "Service Route Ready Duration", 0),
    ("ingress_ready", "Service Ingress Ready Duration", 1),
    ("ingress_network_configured", "Service Ingress Network Configured Duration", 2),
    ("ingress_load_balancer_ready", "Service Ingress LoadBalancer Ready Duration", 2),
)


# =============================================================================
# JSON RECORD
# =============================================================================

class PlatformOut(BaseModel):
    serving_version: str
    eventing_version: str
    ingress_controller: str
    ingress_version: str


class ServiceCountsOut(BaseModel):
    total: int
    ready: int
    not_ready: int
    not_found: int
    fail: int


class MeasureReport(BaseModel):
    platform: PlatformOut
    service: ServiceCountsOut
    partial_count: int = 0
    sums: Dict[str, float] = Field(default_factory=dict)
    averages: Optional[Dict[str, float]] = None
    overall: Optional[Dict[str, float]] = None
    overall_ready_samples: List[float] = Field(default_factory=list)

    @classmethod
    def from_aggregate(cls, aggregate: GlobalAggregate) -> "MeasureReport":
        return cls.model_validate(aggregate.to_dict())


# =============================================================================
# FILE WRITERS
# =============================================================================

def check_output_location(location: Union[str, Path]) -> Path:
    """Resolve and create the output directory."""
    path = Path(location).expanduser().resolve()
    if path.exists() and not path.is_dir():
        raise NotADirectoryError(f"{path} is not a directory")
    path.mkdir(parents=True, exist_ok=True)
    if not path.is_dir():
        raise NotADirectoryError(f"{path} is not a directory")
    return path


def write_csv(path: Path, header: List[str], rows: List[List[str]]) -> None:
    pd.DataFrame(rows, columns=header).to_csv(path, index=False)


def write_json(path: Path, aggregate: GlobalAggregate) -> None:
    path.write_text(MeasureReport.from_aggregate(aggregate).model_dump_json(indent=2))


def write_html(csv_path: Path, html_path: Path) -> None:
    """Render the duration CSV as an HTML page (per-target table + averages)."""
    df = pd.read_csv(csv_path)
    numeric = df.drop(columns=["svc_name", "svc_namespace"], errors="ignore")
    averages = numeric.mean().round(2).to_frame(name="average_seconds")
    html = (
        "<!DOCTYPE html>\n<html>\n<head><meta charset=\"utf-8\">"
        "<title>Knative Service Creation Time</title></head>\n<body>\n"
        "<h1>Knative Service Creation Time</h1>\n"
        f"<p>Services measured: {len(df)}</p>\n"
        "<h2>Average duration per stage (seconds)</h2>\n"
        f"{averages.to_html()}\n"
        "<h2>Per service duration (seconds)</h2>\n"
        f"{df.to_html(index=False)}\n"
        "</body>\n</html>\n"
    )
    html_path.write_text(html)


def write_reports(outcome: MeasureOutcome, output_dir: Union[str, Path], now: Optional[datetime] = None) -> Dict[str, Path]:
    """Write all report files; a failing file is logged and skipped."""
    location = check_output_location(output_dir)
    stamp = (now or datetime.now()).strftime(DATE_FORMAT)
    paths = {
        "raw_csv": location / f"{stamp}_{RAW_CSV_NAME}",
        "csv": location / f"{stamp}_{CSV_NAME}",
        "json": location / f"{stamp}_{JSON_NAME}",
        "html": location / f"{stamp}_{HTML_NAME}",
    }
    written: Dict[str, Path] = {}

    steps = (
        ("raw_csv", "Raw Timestamp saved in CSV file",
         lambda p: write_csv(p, outcome.raw_header, outcome.raw_rows)),
        ("csv", "Measurement saved in CSV file",
         lambda p: write_csv(p, outcome.duration_header, outcome.duration_rows)),
        ("json", "Measurement saved in JSON file",
         lambda p: write_json(p, outcome.aggregate)),
        ("html", "Visualized measurement saved in HTML file",
         lambda p: write_html(paths["csv"], p)),
    )
    for key, message, write in steps:
        try:
            write(paths[key])
        except (OSError, ValueError) as e:
            logger.error("[REPORT] failed to generate %s file and skip: %s", key, e)
            continue
        written[key] = paths[key]
        logger.info("[REPORT] %s %s", message, paths[key])
    return written


# =============================================================================
# CONSOLE
# =============================================================================

def _tree_indent(level: int) -> str:
    return "  " * level


def format_summary(aggregate: GlobalAggregate) -> List[str]:
    c = aggregate.counts
    p = aggregate.platform
    lines = [
        "-------- Measurement --------" if aggregate.has_statistics else "-----------------------------",
        "Basic Information:",
        "  - Knative Versions:",
        f"    Serving: {p.serving_version}",
        f"    Eventing: {p.eventing_version}",
        "  - Ingress Information:",
        f"    Controller: {p.ingress_controller}",
        f"    Version: {p.ingress_version}",
    ]
    if not aggregate.has_statistics:
        lines.append("Service Ready Measurement:")
        lines.append(
            f"Total: {c.total} | Ready: {c.ready} NotReady: {c.not_ready} "
            f"NotFound: {c.not_found} Fail: {c.fail}"
        )
        return lines

    lines.append(
        f"Total: {c.total} | Ready: {c.ready} NotReady: {c.not_ready} "
        f"NotFound: {c.not_found} Fail: {c.fail}"
    )
    for stage, label, level in _SUMMARY_TREE:
        if stage == "routes_ready":
            lines.append("")
        lines.append(f"{tree_label(label, level)}:")
        indent = _tree_indent(level)
        lines.append(f"{indent}Total: {aggregate.stage_sums[stage]:f}s")
        lines.append(f"{indent}Average: {aggregate.stage_averages[stage]:f}s")

    o = aggregate.overall
    lines.extend([
        "",
        "-----------------------------",
        "Overall Service Ready Measurement:",
        f"Total: {c.total} | Ready: {c.ready} ({c.percent(c.ready):.2f}%)  "
        f"NotReady: {c.not_ready} ({c.percent(c.not_ready):.2f}%)  "
        f"NotFound: {c.not_found} ({c.percent(c.not_found):.2f}%)  "
        f"Fail: {c.fail} ({c.percent(c.fail):.2f}%) ",
        f"Total: {o.total:f}s",
        f"Average: {o.average:f}s",
        f"Median: {o.median:f}s",
        f"Min: {o.min:f}s",
        f"Max: {o.max:f}s",
        f"Percentile50: {o.p50:f}s",
        f"Percentile90: {o.p90:f}s",
        f"Percentile95: {o.p95:f}s",
        f"Percentile98: {o.p98:f}s",
        f"Percentile99: {o.p99:f}s",
    ])
    if aggregate.partial_count:
        lines.append(f"Partial samples (no pod observed): {aggregate.partial_count}")
    return lines


def print_summary(aggregate: GlobalAggregate) -> None:
    print("\n".join(format_summary(aggregate)))
