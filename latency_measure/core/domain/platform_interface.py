"""Abstract interface for the platform the engine reads from.

The engine never constructs clients; any implementation (kubectl,
in-memory) is injected. Implementations raise only PlatformError
subclasses from lookups.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from .snapshots import (
    ConfigurationSnapshot,
    PlatformInfo,
    PodSnapshot,
    ResourceSnapshot,
    ServiceSnapshot,
)


class IPlatformClient(ABC):
    """Read-only view of the serving platform.

    Implementations:
    - KubectlPlatformClient: shells out to kubectl
    - InMemoryPlatform: dictionary-backed, for tests and offline runs
    """

    @abstractmethod
    def get_service(self, name: str, namespace: str) -> ServiceSnapshot:
        """Fetch the top-level workload service.

        Raises:
            PlatformNotFoundError: service does not exist
            PlatformLookupError: any other failure
        """

    @abstractmethod
    def get_configuration(self, name: str, namespace: str) -> ConfigurationSnapshot:
        pass

    @abstractmethod
    def get_revision(self, name: str, namespace: str) -> ResourceSnapshot:
        pass

    @abstractmethod
    def list_pods(self, namespace: str, label_selector: str) -> List[PodSnapshot]:
        pass

    @abstractmethod
    def get_deployment(self, name: str, namespace: str) -> ResourceSnapshot:
        pass

    @abstractmethod
    def get_autoscaler(self, name: str, namespace: str) -> ResourceSnapshot:
        pass

    @abstractmethod
    def get_mesh_resource(self, name: str, namespace: str) -> ResourceSnapshot:
        pass

    @abstractmethod
    def get_ingress(self, name: str, namespace: str) -> ResourceSnapshot:
        pass

    @abstractmethod
    def list_services(self, namespace: str) -> List[ServiceSnapshot]:
        """Used by target discovery only."""

    @abstractmethod
    def get_platform_info(self) -> PlatformInfo:
        """Serving/eventing/ingress versions. May raise PlatformError."""
