"""Target enumeration - the producer feeding the worker queue.

Two sources, combinable (explicit range first):
- explicit range: ``<svc_prefix>-<i>`` for i in [start, end] in one namespace
- discovery: list services in ``<ns_prefix>-<j>`` namespaces, keep those
  whose name starts with ``svc_prefix``
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .domain.platform_interface import IPlatformClient
from .domain.target import Target

logger = logging.getLogger(__name__)


def parse_range(value: str, flag: str = "range") -> Tuple[int, int]:
    """Parse ``"1,500"`` into ``(1, 500)``."""
    parts = (value or "").split(",")
    if len(parts) != 2:
        raise ValueError(f"expected {flag} like 1,500, given {value}")
    try:
        start, end = int(parts[0].strip()), int(parts[1].strip())
    except ValueError:
        raise ValueError(f"expected {flag} like 1,500, given {value}")
    return start, end


def targets_from_range(svc_prefix: str, svc_range: str, namespace: str) -> List[Target]:
    start, end = parse_range(svc_range, "range")
    return [Target(name=f"{svc_prefix}-{i}", namespace=namespace) for i in range(start, end + 1)]


def discover_targets(
    client: IPlatformClient,
    namespace_prefix: str,
    namespace_range: str,
    svc_prefix: str = "",
) -> List[Target]:
    """List services across a namespace range.

    Listing errors propagate: discovery failing is fatal for the run.
    """
    start, end = parse_range(namespace_range, "namespace-range")
    targets: List[Target] = []
    for i in range(start, end + 1):
        ns = f"{namespace_prefix}-{i}"
        services = client.list_services(ns)
        if not services:
            logger.info("[ENUM] no service found under namespace %s and skip", ns)
            continue
        matched = [s for s in services if s.name.startswith(svc_prefix or "")]
        targets.extend(Target(name=s.name, namespace=ns) for s in matched)
        logger.debug("[ENUM] namespace=%s services=%d matched=%d", ns, len(services), len(matched))
    return targets


def enumerate_targets(
    client: Optional[IPlatformClient],
    svc_prefix: str = "",
    svc_range: Optional[str] = None,
    namespace: Optional[str] = None,
    namespace_prefix: Optional[str] = None,
    namespace_range: Optional[str] = None,
) -> List[Target]:
    """Build the ordered target list from whichever sources are configured."""
    targets: List[Target] = []
    if namespace:
        targets.extend(targets_from_range(svc_prefix, svc_range or "", namespace))

    if namespace_prefix and namespace_range:
        if client is None:
            raise ValueError("namespace discovery requires a platform client")
        targets.extend(discover_targets(client, namespace_prefix, namespace_range, svc_prefix))

    logger.info("[ENUM] targets=%d", len(targets))
    return targets
