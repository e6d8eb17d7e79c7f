import pytest
from pydantic import ValidationError

from grc.models import RollingUpdateConfiguration, RolloutStrategy, Workload
from grc.rollout import IntOrPercent, RolloutParameters, has_explicit_partition, resolve_rollout_parameters

from conftest import make_workload


@pytest.mark.parametrize("replicas", [0, 1, 5, 100])
def test_no_strategy_uses_defaults_regardless_of_replicas(replicas):
    wl = make_workload(replicas=replicas, strategy=False)
    assert resolve_rollout_parameters(wl).as_tuple() == (0, 1, 0)


def test_strategy_without_rolling_update_configuration_uses_defaults():
    wl = make_workload(replicas=5)
    assert wl.spec.rollout_strategy is not None
    assert wl.spec.rollout_strategy.rolling_update_configuration is None
    assert resolve_rollout_parameters(wl) == RolloutParameters(partition=0, max_unavailable=1, max_surge=0)


@pytest.mark.parametrize(
    "replicas,partition,max_unavailable,max_surge,expected",
    [
        (10, 3, 2, 1, (3, 2, 1)),
        (10, 2, "20%", "10%", (2, 2, 1)),
        # 2.5 rounds down, 1.5 rounds up
        (5, None, "50%", "30%", (0, 2, 2)),
        (100, 10, "15%", "5%", (10, 15, 5)),
    ],
)
def test_declared_values(replicas, partition, max_unavailable, max_surge, expected):
    wl = make_workload(replicas=replicas, partition=partition, max_unavailable=max_unavailable, max_surge=max_surge)
    assert resolve_rollout_parameters(wl).as_tuple() == expected


def test_partition_only_keeps_count_defaults():
    wl = make_workload(replicas=8, partition=4)
    assert resolve_rollout_parameters(wl).as_tuple() == (4, 1, 0)


def test_small_percentage_can_floor_to_zero_unavailable():
    wl = make_workload(replicas=3, max_unavailable="10%", max_surge="10%")
    assert resolve_rollout_parameters(wl).as_tuple() == (0, 0, 1)


def test_negative_integers_are_clamped():
    wl = make_workload(replicas=4, partition=-2, max_unavailable=-1, max_surge=-3)
    assert resolve_rollout_parameters(wl).as_tuple() == (0, 0, 0)


def test_parses_wire_format_aliases():
    wl = Workload.model_validate(
        {
            "metadata": {"name": "qwen"},
            "spec": {
                "replicas": 10,
                "rolloutStrategy": {
                    "type": "RollingUpdate",
                    "rollingUpdateConfiguration": {"partition": 1, "maxUnavailable": "30%", "maxSurge": 2},
                },
            },
        }
    )
    assert resolve_rollout_parameters(wl).as_tuple() == (1, 3, 2)


@pytest.mark.parametrize("bad", ["abc", "20", "%", "-5%"])
def test_rejects_non_percentage_strings(bad):
    with pytest.raises(ValidationError):
        RollingUpdateConfiguration(max_unavailable=bad)


@pytest.mark.parametrize(
    "raw,total,round_up,expected",
    [
        ("25%", 10, False, 2),
        ("25%", 10, True, 3),
        ("100%", 7, False, 7),
        ("0%", 7, True, 0),
        ("50%", 0, True, 0),
        (4, 2, False, 4),
    ],
)
def test_int_or_percent_scaling(raw, total, round_up, expected):
    assert IntOrPercent.parse(raw).scaled(total, round_up=round_up) == expected


@pytest.mark.parametrize("partition,expected", [(None, False), (0, False), (1, True), (5, True)])
def test_has_explicit_partition(partition, expected):
    wl = make_workload(partition=partition, max_surge=0)
    assert has_explicit_partition(wl) is expected


def test_has_explicit_partition_without_strategy():
    assert has_explicit_partition(make_workload(strategy=False)) is False
    wl = make_workload()
    wl.spec.rollout_strategy = RolloutStrategy()
    assert has_explicit_partition(wl) is False
