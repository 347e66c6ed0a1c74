# stats_aggregate.py
# SPDX-License-Identifier: MIT
"""
Aggregation helpers for per-pool ``PoolStats.as_dict()`` outputs.

Counts are summed, the hit rate is recomputed from the summed hits and
misses, and utilization is averaged across pools since it is a ratio per
pool rather than an additive count.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

__all__ = ["empty_summary", "summarize_pools", "merge_summaries"]

_ADDITIVE_KEYS = ("total_objects", "total_hits", "total_misses", "total_created")


def empty_summary() -> dict[str, Any]:
    """Return a zeroed summary for a side with no pools."""
    return {
        "total_pools": 0,
        "total_objects": 0,
        "total_hits": 0,
        "total_misses": 0,
        "total_created": 0,
        "average_hit_rate": 0.0,
        "average_utilization": 0.0,
        "pools": [],
    }


def _finish(summary: dict[str, Any], utilizations: Sequence[float]) -> dict[str, Any]:
    lookups = summary["total_hits"] + summary["total_misses"]
    summary["average_hit_rate"] = summary["total_hits"] / lookups if lookups > 0 else 0.0
    summary["average_utilization"] = sum(utilizations) / len(utilizations) if utilizations else 0.0
    return summary


def summarize_pools(pools: Sequence[Mapping[str, Any]]) -> dict[str, Any]:
    """
    Fold per-pool stats dicts (each carrying a ``key``) into one summary.
    """
    summary = empty_summary()
    utilizations: list[float] = []
    for entry in pools:
        summary["total_pools"] += 1
        summary["total_objects"] += int(entry.get("size", 0))
        summary["total_hits"] += int(entry.get("hits", 0))
        summary["total_misses"] += int(entry.get("misses", 0))
        summary["total_created"] += int(entry.get("total_created", 0))
        utilizations.append(float(entry.get("utilization", 0.0)))
        summary["pools"].append(dict(entry))
    return _finish(summary, utilizations)


def merge_summaries(summaries: Sequence[Mapping[str, Any]]) -> dict[str, Any]:
    """
    Merge several :func:`summarize_pools` outputs, e.g. from separate registries.
    """
    merged = empty_summary()
    utilizations: list[float] = []
    for data in summaries:
        merged["total_pools"] += int(data.get("total_pools", 0))
        for key in _ADDITIVE_KEYS:
            merged[key] += int(data.get(key, 0))
        for entry in data.get("pools") or ():
            merged["pools"].append(dict(entry))
            utilizations.append(float(entry.get("utilization", 0.0)))
    return _finish(merged, utilizations)
