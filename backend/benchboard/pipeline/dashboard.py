# backend/benchboard/pipeline/dashboard.py
"""
Dashboard aggregates over bench resources.

All functions take light resource dicts (joiningDate, grade, primarySkill,
totalExp) and an explicit `today`, so they are pure and easy to test.
`refresh_metrics(session)` recomputes the singleton dashboard_metrics row.
"""

from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy.orm import Session

from ..core.config import DEFAULT_OPTIONS
from ..core.utils import days_between, parse_date_value
from ..db import crud
from ..db.models import metrics_to_dict

AGEING_KEYS = ["0-30", "31-60", "61-90", "more_than_90"]


def _joined(resource: Mapping[str, Any]) -> Optional[date]:
    return parse_date_value(resource.get("joiningDate"))


def bench_ageing(resources: Iterable[Mapping[str, Any]], today: date) -> Dict[str, int]:
    """Count resources per ageing bracket (days since joiningDate)."""
    data = {k: 0 for k in AGEING_KEYS}
    for r in resources:
        joined = _joined(r)
        if joined is None:
            continue
        days = days_between(joined, today)
        for limit, key in DEFAULT_OPTIONS["ageing_brackets"]:
            if days <= limit:
                data[key] += 1
                break
        else:
            data["more_than_90"] += 1
    return data


def _distribution(values: Iterable[Optional[str]], top: Optional[int] = None) -> List[Dict[str, Any]]:
    counts = Counter(v for v in values if v)
    # most_common keeps first-seen order among ties
    return [{"name": k, "value": n} for k, n in counts.most_common(top)]


def grade_distribution(resources: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    return _distribution(r.get("grade") for r in resources)


def skill_distribution(resources: Iterable[Mapping[str, Any]], top: Optional[int] = None) -> List[Dict[str, Any]]:
    return _distribution(
        (r.get("primarySkill") for r in resources),
        top or DEFAULT_OPTIONS["top_skills"],
    )


def compute_metrics(resources: Iterable[Mapping[str, Any]], today: date) -> Dict[str, Any]:
    resources = list(resources)
    ageing = bench_ageing(resources, today)
    threshold = DEFAULT_OPTIONS["high_experience_years"]
    new_this_month = 0
    for r in resources:
        joined = _joined(r)
        if joined and joined.year == today.year and joined.month == today.month:
            new_this_month += 1
    top = skill_distribution(resources, top=1)
    return {
        "total_bench": len(resources),
        "on_bench_90_plus": ageing["more_than_90"],
        "high_experience_count": sum(1 for r in resources if (r.get("totalExp") or 0) >= threshold),
        "new_this_month": new_this_month,
        "top_skill": top[0]["name"] if top else None,
    }


def refresh_metrics(session: Session, today: Optional[date] = None) -> Dict[str, Any]:
    rows = crud.dashboard_rows(session)
    values = compute_metrics(rows, today or date.today())
    crud.save_dashboard_metrics(session, values)
    return values


def dashboard_snapshot(session: Session, today: Optional[date] = None) -> Dict[str, Any]:
    """Everything the dashboard page needs in one payload."""
    today = today or date.today()
    rows = crud.dashboard_rows(session)
    stored = crud.get_dashboard_metrics(session)
    return {
        "metrics": metrics_to_dict(stored) if stored else None,
        "benchAgeing": bench_ageing(rows, today),
        "gradeDistribution": grade_distribution(rows),
        "skillDistribution": skill_distribution(rows),
    }


__all__ = [
    "AGEING_KEYS", "bench_ageing", "grade_distribution", "skill_distribution",
    "compute_metrics", "refresh_metrics", "dashboard_snapshot",
]
