"""Report module: writes the weekly leaderboard as Markdown."""

from datetime import timedelta
from pathlib import Path
from typing import List, Optional, Union

from . import config
from .ranking import RankedProfile
from .window import WeekWindow


def render_markdown(ranked: List[RankedProfile], window: WeekWindow) -> str:
    """Render *ranked* (already ordered) as a Markdown leaderboard."""
    last_day = (window.end - timedelta(days=1)).date()
    lines: List[str] = [
        "# Weekly Rankings",
        "",
        f"> Week of {window.start.date().isoformat()} to {last_day.isoformat()}",
        "",
    ]
    if not ranked:
        lines.append("_No rivals tracked yet._")

    for rank, entry in enumerate(ranked, start=1):
        profile = entry.profile
        handles = ", ".join(
            f"{p.value}: {profile.handles[p]}" for p in profile.tracked_platforms()
        ) or "no platforms"
        total = sum(s.total_solved for s in profile.stats.values())
        line = f"{rank}. **{profile.display_name}** ({handles}) — {entry.weekly_score} this week"
        extras = [f"{total} solved all-time"]
        if entry.streak:
            extras.append(f"{entry.streak}-day streak")
        line += f"\n   > {' · '.join(extras)}"
        lines.append(line)

    return "\n".join(lines) + "\n"


def write_markdown_report(
    ranked: List[RankedProfile],
    window: WeekWindow,
    output_path: Optional[Union[str, Path]] = None,
) -> Path:
    path = Path(output_path) if output_path is not None else config.REPORT_PATH
    path.write_text(render_markdown(ranked, window), encoding="utf-8")
    return path


__all__ = ["render_markdown", "write_markdown_report"]
