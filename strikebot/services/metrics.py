from __future__ import annotations

from datetime import datetime
from typing import Dict


stats: Dict = {
    "strikes_added": 0,
    "bans_issued": 0,
    "strikes_removed": 0,
    "strikes_cleared": 0,
    "removals_undone": 0,
    "started_at": datetime.now(),
}


def reset_stats() -> None:
    for key in ("strikes_added", "bans_issued", "strikes_removed", "strikes_cleared", "removals_undone"):
        stats[key] = 0
    stats["started_at"] = datetime.now()
