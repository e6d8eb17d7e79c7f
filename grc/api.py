from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import FastAPI, HTTPException, Query

from . import db
from .api_models import EventResponse, GroupReport, ReconcileResponse, RolloutParametersResponse
from .conditions import GroupSets
from .models import Workload, WorkloadSpec
from .reconciler import GroupClassifier, Reconciler, RolloutExecutor
from .rollout import RolloutParameters, resolve_rollout_parameters
from .runtime import ConflictError, InMemoryWorkloadStore


def _params(p: RolloutParameters) -> RolloutParametersResponse:
    return RolloutParametersResponse(partition=p.partition, max_unavailable=p.max_unavailable, max_surge=p.max_surge)


def create_app(
    store: InMemoryWorkloadStore | None = None,
    classifier: GroupClassifier | None = None,
    executor: RolloutExecutor | None = None,
) -> FastAPI:
    """Build the HTTP surface around a workload store.

    With a `classifier`, a background reconciler polls every stored workload
    for the lifetime of the app. Without one, group classifications arrive
    through `POST /workloads/{name}/status`.

    Run with: uvicorn --factory grc.api:create_app
    """
    store = store if store is not None else InMemoryWorkloadStore()
    db.init_db()
    background = Reconciler(store, classifier, executor=executor) if classifier is not None else None

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        if background is not None:
            background.start()
        try:
            yield
        finally:
            if background is not None:
                background.stop()

    app = FastAPI(title="Group Rollout Controller", lifespan=lifespan)
    app.state.store = store
    app.state.reconciler = background

    def _get(name: str) -> Workload:
        try:
            return store.get(name)
        except KeyError:
            raise HTTPException(status_code=404, detail=f"Unknown workload '{name}'")

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "healthy"}

    @app.get("/workloads", response_model=list[Workload])
    def list_workloads() -> list[Workload]:
        return store.list_workloads()

    @app.get("/workloads/{name}", response_model=Workload)
    def get_workload(name: str) -> Workload:
        return _get(name)

    @app.put("/workloads/{name}", response_model=Workload)
    def apply_workload(name: str, spec: WorkloadSpec) -> Workload:
        wl = store.apply(name, spec)
        db.log_event("INFO", f"Applied spec (generation {wl.metadata.generation})", workload=name)
        return wl

    @app.get("/workloads/{name}/rollout-parameters", response_model=RolloutParametersResponse)
    def rollout_parameters(name: str) -> RolloutParametersResponse:
        return _params(resolve_rollout_parameters(_get(name)))

    @app.post("/workloads/{name}/status", response_model=ReconcileResponse)
    def report_groups(name: str, report: GroupReport) -> ReconcileResponse:
        groups = GroupSets.of(report.progressing, report.updated, report.current)
        reconciler = Reconciler(store, classifier=lambda _wl: groups)
        try:
            result = reconciler.reconcile(name)
        except KeyError:
            raise HTTPException(status_code=404, detail=f"Unknown workload '{name}'")
        except ConflictError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return ReconcileResponse(
            workload=name,
            changed=result.changed,
            attempts=result.attempts,
            parameters=_params(result.parameters),
            condition=result.condition,
        )

    @app.get("/events", response_model=list[EventResponse])
    def events(limit: int = Query(50, ge=1, le=1000), workload: str | None = None) -> list[EventResponse]:
        return [EventResponse(**asdict(e)) for e in db.list_events(limit=limit, workload=workload)]

    return app
