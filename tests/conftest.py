import dataclasses
import os as _os
import sys

import pytest

# Ensure project root is importable when running without an editable install.
_project_root = _os.path.dirname(_os.path.dirname(__file__))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from grc import db  # noqa: E402
from grc.models import (  # noqa: E402
    ObjectMeta,
    RollingUpdateConfiguration,
    RolloutStrategy,
    Workload,
    WorkloadSpec,
)


@pytest.fixture(autouse=True)
def isolated_db(tmp_path, monkeypatch):
    """Point the event journal at a throwaway sqlite file."""
    test_settings = dataclasses.replace(db.settings, db_path=str(tmp_path / "events.db"), record_events=True)
    monkeypatch.setattr(db, "settings", test_settings)
    db.init_db()
    return test_settings


def make_workload(name="llama", replicas=4, partition=None, max_unavailable=None, max_surge=None, strategy=True):
    rolling = None
    if any(v is not None for v in (partition, max_unavailable, max_surge)):
        rolling = RollingUpdateConfiguration(
            partition=partition, max_unavailable=max_unavailable, max_surge=max_surge
        )
    rollout_strategy = RolloutStrategy(rolling_update_configuration=rolling) if strategy else None
    return Workload(
        metadata=ObjectMeta(name=name),
        spec=WorkloadSpec(replicas=replicas, rollout_strategy=rollout_strategy),
    )
