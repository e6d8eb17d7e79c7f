from __future__ import annotations

from threading import Lock
from typing import Protocol

from .models import ObjectMeta, Workload, WorkloadSpec


class ConflictError(Exception):
    """A write was based on a stale resourceVersion."""


class WorkloadStore(Protocol):
    def get(self, name: str) -> Workload: ...

    def update_status(self, workload: Workload) -> Workload: ...

    def list_names(self) -> list[str]: ...


class InMemoryWorkloadStore:
    """Thread-safe workload store with optimistic concurrency.

    Reads hand out deep copies; every accepted write bumps resourceVersion.
    Status writes must carry the resourceVersion they were read at.
    """

    def __init__(self) -> None:
        self.lock = Lock()
        self._items: dict[str, Workload] = {}  # name -> stored workload
        self._counter = 0

    def _next_version(self) -> str:
        self._counter += 1
        return str(self._counter)

    def get(self, name: str) -> Workload:
        with self.lock:
            wl = self._items.get(name)
            if wl is None:
                raise KeyError(f"unknown workload '{name}'")
            return wl.model_copy(deep=True)

    def list_names(self) -> list[str]:
        with self.lock:
            return sorted(self._items)

    def list_workloads(self) -> list[Workload]:
        with self.lock:
            return [self._items[n].model_copy(deep=True) for n in sorted(self._items)]

    def apply(self, name: str, spec: WorkloadSpec) -> Workload:
        """Create the workload or replace its spec, keeping its status."""
        with self.lock:
            prev = self._items.get(name)
            if prev is None:
                wl = Workload(metadata=ObjectMeta(name=name), spec=spec.model_copy(deep=True))
            else:
                wl = prev.model_copy(deep=True)
                if wl.spec != spec:
                    wl.spec = spec.model_copy(deep=True)
                    wl.metadata.generation += 1
            wl.metadata.resource_version = self._next_version()
            self._items[name] = wl
            return wl.model_copy(deep=True)

    def update_status(self, workload: Workload) -> Workload:
        name = workload.metadata.name
        with self.lock:
            prev = self._items.get(name)
            if prev is None:
                raise KeyError(f"unknown workload '{name}'")
            if prev.metadata.resource_version != workload.metadata.resource_version:
                raise ConflictError(
                    f"workload '{name}' changed: have {workload.metadata.resource_version}, "
                    f"stored {prev.metadata.resource_version}"
                )
            stored = prev.model_copy(deep=True)
            stored.status = workload.status.model_copy(deep=True)
            stored.metadata.resource_version = self._next_version()
            self._items[name] = stored
            return stored.model_copy(deep=True)
