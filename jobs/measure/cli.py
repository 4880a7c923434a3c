"""CLI entry point for the measure runner."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from common.config import get_settings
from latency_measure.core.domain.errors import NoTargetsError, PlatformError

from .config import MeasureRunConfig
from .runner import run_measure

logger = logging.getLogger(__name__)

EXAMPLE = """For example:
# To measure a Knative Service creation time running currently with 20 concurrent jobs
ksvc-measure --svc-prefix svc --range 1,200 --namespace ns --concurrency 20
"""


def build_parser(default_concurrency: int = 10, default_output: str = ".") -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description="Measure Knative service creation time",
        epilog=EXAMPLE,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("-r", "--range", dest="svc_range", help="Desired service range, e.g. 1,500")
    p.add_argument("--namespace", help="Service namespace")
    p.add_argument("--svc-prefix", default="", help="Service name prefix")
    p.add_argument("-v", "--verbose", action="store_true", help="Service verbose result")
    p.add_argument("--namespace-range", help="Service namespace range, e.g. 1,10")
    p.add_argument("--namespace-prefix", help="Service namespace prefix")
    p.add_argument("-c", "--concurrency", type=int, default=default_concurrency,
                   help="Number of workers to do measurement job")
    p.add_argument("-o", "--output", default=default_output, help="Measure result location")
    p.add_argument("--context", default=None, help="kubeconfig context to use")
    p.add_argument("--lookup-timeout", type=float, default=None,
                   help="Timeout in seconds for each platform lookup")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )

    p = build_parser(settings.concurrency, settings.output_dir)
    args = p.parse_args(argv)

    cfg = MeasureRunConfig(
        svc_prefix=args.svc_prefix,
        svc_range=args.svc_range,
        namespace=args.namespace,
        namespace_prefix=args.namespace_prefix,
        namespace_range=args.namespace_range,
        concurrency=args.concurrency,
        output_dir=args.output,
        verbose=bool(args.verbose),
        kubectl_bin=settings.kubectl_bin,
        kube_context=args.context or settings.kube_context,
        lookup_timeout_seconds=(
            args.lookup_timeout if args.lookup_timeout is not None else settings.lookup_timeout_seconds
        ),
    )

    try:
        run_measure(cfg)
    except NoTargetsError as e:
        logger.error("%s", e)
        return 1
    except (ValueError, PlatformError, OSError) as e:
        logger.error("Measurement aborted: %s", e)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
