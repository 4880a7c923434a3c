"""Measure runner orchestrator: enumerate -> engine -> reports."""

from __future__ import annotations

import logging
from typing import Optional

from latency_measure.core.domain.errors import NoTargetsError
from latency_measure.core.domain.platform_interface import IPlatformClient
from latency_measure.core.enumerator import enumerate_targets
from latency_measure.engine import MeasureEngine, MeasureOutcome
from latency_measure.platform.kubectl_client import KubectlPlatformClient

from .config import MeasureRunConfig
from .report import check_output_location, print_summary, write_reports

logger = logging.getLogger(__name__)


def build_client(cfg: MeasureRunConfig) -> IPlatformClient:
    return KubectlPlatformClient(
        kubectl_bin=cfg.kubectl_bin,
        context=cfg.kube_context,
        lookup_timeout=cfg.lookup_timeout_seconds,
    )


def run_measure(cfg: MeasureRunConfig, client: Optional[IPlatformClient] = None) -> MeasureOutcome:
    """One measurement run. Raises on invalid flags, an unusable output
    directory, discovery errors or no targets.
    """
    cfg.validate()
    # Output location is settled before any platform lookup
    output_dir = check_output_location(cfg.output_dir)
    if client is None:
        client = build_client(cfg)

    targets = enumerate_targets(
        client,
        svc_prefix=cfg.svc_prefix,
        svc_range=cfg.svc_range,
        namespace=cfg.namespace,
        namespace_prefix=cfg.namespace_prefix,
        namespace_range=cfg.namespace_range,
    )
    if not targets:
        raise NoTargetsError()

    logger.info(
        "[RUNNER] measuring targets=%d concurrency=%d verbose=%s",
        len(targets), cfg.concurrency, cfg.verbose,
    )
    outcome = MeasureEngine(client, cfg.concurrency, verbose=cfg.verbose).measure(targets)

    print_summary(outcome.aggregate)
    if outcome.aggregate.counts.ready > 0:
        write_reports(outcome, output_dir)
    return outcome
