"""Export ranked matches to CSV and JSON."""

from __future__ import annotations

import csv
import json
from datetime import datetime
from pathlib import Path
from typing import Any

from ..access import MatchView
from ..models import utcnow


def _serialize(obj: Any) -> Any:
    """JSON serializer for datetime and other objects."""
    if isinstance(obj, datetime):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


CSV_FIELDS = [
    "rank",
    "match_id",
    "counterparty_id",
    "counterparty_name",
    "off_platform",
    "locked",
    "city",
    "state",
    "asking_price",
    "overall_score",
    "financial_score",
    "urgency_score",
    "location_score",
    "motivation_score",
    "closing_probability_score",
    "key_alignment_factors",
]


def export_csv(views: list[MatchView], path: Path | str) -> None:
    """Export ranked match views to CSV. Locked rows keep scores but no identity."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for v in views:
            m = v.match
            writer.writerow({
                "rank": v.rank,
                "match_id": "" if v.locked else m.id,
                "counterparty_id": "" if v.locked else m.counterparty_id,
                "counterparty_name": v.counterparty_name or "",
                "off_platform": m.off_platform_seller_id is not None,
                "locked": v.locked,
                "city": v.city or "",
                "state": v.state or "",
                "asking_price": v.asking_price if v.asking_price is not None else "",
                "overall_score": m.overall_score,
                "financial_score": m.financial_score,
                "urgency_score": m.urgency_score,
                "location_score": m.location_score,
                "motivation_score": m.motivation_score,
                "closing_probability_score": m.closing_probability_score,
                "key_alignment_factors": " | ".join(m.key_alignment_factors),
            })


def export_json(views: list[MatchView], path: Path | str, user_id: str | None = None) -> None:
    """Export full match views to JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "exported_at": utcnow().isoformat(),
        "user_id": user_id,
        "count": len(views),
        "locked_count": sum(1 for v in views if v.locked),
        "matches": [v.to_dict() for v in views],
    }

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, default=_serialize)
