from __future__ import annotations

from dataclasses import dataclass

from .models import IntOrString, Workload


DEFAULT_PARTITION = 0
DEFAULT_MAX_UNAVAILABLE = 1
DEFAULT_MAX_SURGE = 0


@dataclass(frozen=True)
class IntOrPercent:
    """An absolute group count or a percentage of the desired replicas."""

    value: int
    is_percent: bool = False

    @classmethod
    def parse(cls, raw: IntOrString) -> IntOrPercent:
        if isinstance(raw, str):
            return cls(value=int(raw.rstrip("%")), is_percent=True)
        return cls(value=int(raw))

    def scaled(self, total: int, round_up: bool) -> int:
        """Resolve against `total`.

        Percentages are rounded down unless `round_up` is set; absolute
        values pass through. The result is never negative.
        """
        if not self.is_percent:
            return max(0, self.value)
        scaled = self.value * max(0, int(total))
        resolved = -(-scaled // 100) if round_up else scaled // 100
        return max(0, resolved)


@dataclass(frozen=True)
class RolloutParameters:
    partition: int = DEFAULT_PARTITION
    max_unavailable: int = DEFAULT_MAX_UNAVAILABLE
    max_surge: int = DEFAULT_MAX_SURGE

    def as_tuple(self) -> tuple[int, int, int]:
        return self.partition, self.max_unavailable, self.max_surge


def _resolve(raw: IntOrString | None, total: int, round_up: bool, default: int) -> int:
    if raw is None:
        return default
    return IntOrPercent.parse(raw).scaled(total, round_up=round_up)


def resolve_rollout_parameters(workload: Workload) -> RolloutParameters:
    """Turn the declared rollout strategy into concrete group counts.

    Without a rolling-update configuration the defaults apply regardless of
    the replica count: no partition, one group unavailable at a time, no
    surge. Percentages always resolve against `spec.replicas`: maxUnavailable
    rounds down and maxSurge rounds up.
    """
    strategy = workload.spec.rollout_strategy
    if strategy is None or strategy.rolling_update_configuration is None:
        return RolloutParameters()

    cfg = strategy.rolling_update_configuration
    replicas = workload.spec.replicas
    partition = DEFAULT_PARTITION if cfg.partition is None else max(0, int(cfg.partition))

    return RolloutParameters(
        partition=partition,
        max_unavailable=_resolve(cfg.max_unavailable, replicas, round_up=False, default=DEFAULT_MAX_UNAVAILABLE),
        max_surge=_resolve(cfg.max_surge, replicas, round_up=True, default=DEFAULT_MAX_SURGE),
    )


def has_explicit_partition(workload: Workload) -> bool:
    # A zero partition holds nothing back, so it counts as undeclared.
    strategy = workload.spec.rollout_strategy
    if strategy is None or strategy.rolling_update_configuration is None:
        return False
    partition = strategy.rolling_update_configuration.partition
    return partition is not None and partition > 0
