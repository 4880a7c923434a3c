from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def _default_env_file() -> str:
    return str(Path.cwd() / ".env")


@dataclass(frozen=True)
class Settings:
    concurrency: int
    output_dir: str

    kubectl_bin: str
    kube_context: Optional[str]
    lookup_timeout_seconds: float

    log_level: str


def get_settings() -> Settings:
    # Load env file (if present) but still allow overriding via real environment variables.
    env_file = os.getenv("MEASURE_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    concurrency = int(os.getenv("MEASURE_CONCURRENCY", "10"))
    output_dir = os.getenv("MEASURE_OUTPUT_DIR", ".")

    kubectl_bin = os.getenv("KUBECTL_BIN", "kubectl")
    # Empty means "use the current kubeconfig context".
    kube_context = os.getenv("KUBE_CONTEXT") or None
    lookup_timeout_seconds = float(os.getenv("MEASURE_LOOKUP_TIMEOUT_SECONDS", "30"))

    log_level = os.getenv("MEASURE_LOG_LEVEL", "INFO").upper()

    return Settings(
        concurrency=concurrency,
        output_dir=output_dir,
        kubectl_bin=kubectl_bin,
        kube_context=kube_context,
        lookup_timeout_seconds=lookup_timeout_seconds,
        log_level=log_level,
    )
