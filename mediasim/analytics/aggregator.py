from __future__ import annotations

from collections import Counter
from typing import Any


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    queries = [e for e in events if e["type"] == "similar_items"]
    total = len(queries)

    # Average response time
    times = [q["response_time_ms"] for q in queries if "response_time_ms" in q]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Average match count before capping
    matches = [q.get("total_matches", 0) for q in queries]
    avg_matches = round(sum(matches) / total, 1) if total else 0.0

    # Most requested reference items
    item_counter: Counter[str] = Counter()
    for q in queries:
        item_counter[q.get("item_id") or "root"] += 1
    top_items = [{"id": i, "count": c} for i, c in item_counter.most_common(10)]

    # Item type usage
    type_counter: Counter[str] = Counter()
    for q in queries:
        for t in q.get("include_item_types", []) or []:
            type_counter[t] += 1

    empty_results = sum(1 for q in queries if not q.get("results_returned"))

    return {
        "total_queries": total,
        "avg_response_time_ms": avg_time,
        "avg_total_matches": avg_matches,
        "top_reference_items": top_items,
        "item_type_usage": dict(type_counter),
        "empty_result_rate": round(empty_results / total * 100, 1) if total else 0.0,
    }
