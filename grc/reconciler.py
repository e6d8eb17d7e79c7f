from __future__ import annotations

import sqlite3
import time
from dataclasses import dataclass
from threading import Thread
from typing import Callable

from . import db
from .conditions import GroupSets, find_rollout_condition, set_condition
from .models import Condition, Workload
from .rollout import RolloutParameters, resolve_rollout_parameters
from .runtime import ConflictError, WorkloadStore
from .settings import settings


GroupClassifier = Callable[[Workload], GroupSets]
RolloutExecutor = Callable[[Workload, RolloutParameters, GroupSets], None]


@dataclass(frozen=True)
class ReconcileResult:
    name: str
    parameters: RolloutParameters
    groups: GroupSets
    condition: Condition | None
    changed: bool
    attempts: int = 1


class Reconciler:
    """Refreshes the rollout-health condition of stored workloads.

    Group classification and replica changes come from the injected
    collaborators; status is written back only when the condition changed.
    """

    def __init__(
        self,
        store: WorkloadStore,
        classifier: GroupClassifier,
        executor: RolloutExecutor | None = None,
        conflict_retries: int | None = None,
    ):
        self.store = store
        self.classifier = classifier
        self.executor = executor
        retries = settings.conflict_retries if conflict_retries is None else conflict_retries
        self.conflict_retries = max(0, int(retries))
        self._stop = False
        self._thr: Thread | None = None
        db.init_db()

    def start(self) -> None:
        if self._thr and self._thr.is_alive():
            return
        self._stop = False
        self._thr = Thread(target=self._loop, daemon=True)
        self._thr.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stop = True
        if timeout is not None and self._thr is not None:
            self._thr.join(timeout)

    @property
    def running(self) -> bool:
        return self._thr is not None and self._thr.is_alive()

    def _loop(self) -> None:
        db.log_event("INFO", "Reconciler started")
        while not self._stop:
            try:
                self.tick()
            except Exception as e:
                db.log_event("ERROR", f"Reconciler tick failed: {type(e).__name__}: {e}")
            time.sleep(max(1, settings.poll_interval_s))

    def tick(self) -> list[ReconcileResult]:
        """Reconcile every stored workload once; one failure does not stop the rest."""
        results: list[ReconcileResult] = []
        for name in self.store.list_names():
            try:
                results.append(self.reconcile(name))
            except Exception as e:
                db.log_event("ERROR", f"Reconcile failed: {type(e).__name__}: {e}", workload=name)
        return results

    def reconcile(self, name: str) -> ReconcileResult:
        attempt = 0
        while True:
            attempt += 1
            wl = self.store.get(name)
            params = resolve_rollout_parameters(wl)
            groups = self.classifier(wl)
            if self.executor is not None:
                self.executor(wl, params, groups)

            before = find_rollout_condition(wl.status.conditions)
            prev = (before.type, before.status) if before else None
            changed = set_condition(wl, groups.progressing, groups.updated, groups.current)
            cond = find_rollout_condition(wl.status.conditions)

            if changed:
                try:
                    self.store.update_status(wl)
                except ConflictError as e:
                    if attempt > self.conflict_retries:
                        raise
                    db.log_event("WARN", f"Status write conflicted, retrying: {e}", workload=name)
                    continue
                self._record_change(name, prev, cond)

            return ReconcileResult(
                name=name,
                parameters=params,
                groups=groups,
                condition=cond,
                changed=changed,
                attempts=attempt,
            )

    def _record_change(self, name: str, prev: tuple[str, str] | None, cond: Condition | None) -> bool:
        """Journal a persisted condition change.

        The status write has already happened, so a journal failure is
        reported as False rather than raised.
        """
        if cond is None:
            return False
        if prev != (cond.type, cond.status):
            prev_label = f"{prev[0]}={prev[1]}" if prev else "none"
            message = f"Condition {prev_label} -> {cond.type}={cond.status} ({cond.reason})"
        else:
            message = f"Condition message updated: {cond.message}"
        try:
            db.log_event("INFO", message, workload=name, condition_type=cond.type)
        except sqlite3.Error:
            return False
        return True
