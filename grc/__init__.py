"""Group Rollout Controller (GRC).

Status-derivation core for staged, partition-gated rollouts of replica groups:
 - resolve a declared rollout strategy into concrete partition/maxUnavailable/maxSurge
 - reduce per-group rollout state into one rollout-health status condition
 - write status back only when that condition actually changed

Group discovery, replica probing and replica mutation are injected collaborators.
"""

from .conditions import GroupSets, RolloutHealth, set_condition
from .rollout import RolloutParameters, resolve_rollout_parameters

__all__ = [
    "GroupSets",
    "RolloutHealth",
    "RolloutParameters",
    "resolve_rollout_parameters",
    "set_condition",
]
