from __future__ import annotations

import argparse
import json
import sys

import requests

from .settings import settings


def _print(obj) -> None:
    print(json.dumps(obj, indent=2, ensure_ascii=False))


def _int_or_percent(raw: str) -> int | str:
    raw = raw.strip()
    return raw if raw.endswith("%") else int(raw)


def _index_list(raw: str) -> list[int]:
    return [int(x) for x in raw.split(",") if x.strip()]


def _spec_payload(args: argparse.Namespace) -> dict:
    payload: dict = {"replicas": args.replicas}
    rolling: dict = {}
    if args.partition is not None:
        rolling["partition"] = args.partition
    if args.max_unavailable is not None:
        rolling["maxUnavailable"] = args.max_unavailable
    if args.max_surge is not None:
        rolling["maxSurge"] = args.max_surge
    if rolling:
        payload["rolloutStrategy"] = {"type": "RollingUpdate", "rollingUpdateConfiguration": rolling}
    return payload


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Group Rollout Controller CLI")
    p.add_argument("--api", default=settings.api_url, help="API base URL")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("workloads", help="List workloads")

    s_apply = sub.add_parser("apply", help="Create or update a workload spec")
    s_apply.add_argument("name")
    s_apply.add_argument("--replicas", type=int, default=1)
    s_apply.add_argument("--partition", type=int)
    s_apply.add_argument("--max-unavailable", type=_int_or_percent, help="Count or percentage, e.g. 2 or 25%%")
    s_apply.add_argument("--max-surge", type=_int_or_percent, help="Count or percentage, e.g. 1 or 10%%")

    s_params = sub.add_parser("params", help="Show resolved rollout parameters")
    s_params.add_argument("name")

    s_rep = sub.add_parser("report", help="Report group classification and refresh the status condition")
    s_rep.add_argument("name")
    s_rep.add_argument("--progressing", type=_index_list, default=[], help="Comma separated group indices")
    s_rep.add_argument("--updated", type=_index_list, default=[])
    s_rep.add_argument("--current", type=_index_list, default=[])

    s_ev = sub.add_parser("events", help="Show events")
    s_ev.add_argument("--limit", type=int, default=20)
    s_ev.add_argument("--workload")

    args = p.parse_args(argv)

    base = args.api.rstrip("/")

    if args.cmd == "workloads":
        _print(requests.get(f"{base}/workloads", timeout=10).json())
        return 0

    if args.cmd == "apply":
        r = requests.put(f"{base}/workloads/{args.name}", json=_spec_payload(args), timeout=30)
        _print(r.json())
        return 0 if r.ok else 1

    if args.cmd == "params":
        r = requests.get(f"{base}/workloads/{args.name}/rollout-parameters", timeout=10)
        _print(r.json())
        return 0 if r.ok else 1

    if args.cmd == "report":
        payload = {"progressing": args.progressing, "updated": args.updated, "current": args.current}
        r = requests.post(f"{base}/workloads/{args.name}/status", json=payload, timeout=30)
        _print(r.json())
        return 0 if r.ok else 1

    if args.cmd == "events":
        params = {"limit": args.limit}
        if args.workload:
            params["workload"] = args.workload
        _print(requests.get(f"{base}/events", params=params, timeout=10).json())
        return 0

    return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
