"""Measure runner configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class MeasureRunConfig:
    """Flags of one measurement run (CLI overrides env settings)."""
    svc_prefix: str
    svc_range: Optional[str]
    namespace: Optional[str]
    namespace_prefix: Optional[str]
    namespace_range: Optional[str]
    concurrency: int
    output_dir: str
    verbose: bool

    kubectl_bin: str = "kubectl"
    kube_context: Optional[str] = None
    lookup_timeout_seconds: float = 30.0

    @property
    def has_explicit_range(self) -> bool:
        return bool(self.namespace)

    @property
    def has_discovery(self) -> bool:
        return bool(self.namespace_prefix) and bool(self.namespace_range)

    def validate(self) -> None:
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be a positive integer, given {self.concurrency}")
        if not (self.has_explicit_range or self.has_discovery):
            raise ValueError(
                "'service measure' requires --namespace (with --range) "
                "or --namespace-prefix with --namespace-range"
            )
        if self.has_explicit_range and not self.svc_range:
            raise ValueError("--range is required with --namespace")
