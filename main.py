"""Main orchestrator script.

Manage the tracked rivals and produce the weekly ranking. Typical use is a
scheduled ``python main.py sync`` followed by ``python main.py rank``, which
prints the leaderboard and writes ``report.md``.
"""

import argparse
import logging
import sys
from datetime import date, datetime
from typing import Dict, List, Optional

from rivals import config
from rivals.models import Platform
from rivals.ranking import rank_profiles
from rivals.report import write_markdown_report
from rivals.resolution import find_similar
from rivals.store import ProfileRepository
from rivals.sync import (
    add_rival,
    edit_rival,
    log_manual_solve,
    normalize_handles,
    remove_rival,
    sync_all,
    sync_rival,
)
from rivals.window import current_window

# ---------------------------------------------------------------------------
# Logging setup (controlled by CR_LOGLEVEL, default INFO)
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger(__name__)


def _handles_from_args(args: argparse.Namespace) -> Dict[Platform, str]:
    handles: Dict[Platform, str] = {}
    if args.codeforces is not None:
        handles[Platform.CODEFORCES] = args.codeforces
    if args.leetcode is not None:
        handles[Platform.LEETCODE] = args.leetcode
    return handles


def cmd_add(repo: ProfileRepository, args: argparse.Namespace) -> int:
    raw = _handles_from_args(args)
    similar = find_similar(repo.all(), args.name, normalize_handles(raw))
    for other in similar:
        logger.warning("Possible duplicate of existing rival %s (%s)", other.display_name, other.id)

    result = add_rival(repo, args.name, raw)
    for platform, err in result.failures.items():
        print(f"{platform.value}: {type(err).__name__}: {err}", file=sys.stderr)
    if not result.ok:
        print("Could not fetch data for any handle. Please check the spelling.", file=sys.stderr)
        return 1
    print(f"Added {result.profile.display_name} ({result.profile.id})")
    return 0


def cmd_edit(repo: ProfileRepository, args: argparse.Namespace) -> int:
    try:
        profile = edit_rival(repo, args.id, args.name, _handles_from_args(args))
    except KeyError:
        print(f"No rival with id {args.id}", file=sys.stderr)
        return 1
    print(f"Updated {profile.display_name}; run `sync {profile.id}` to refresh stats")
    return 0


def cmd_remove(repo: ProfileRepository, args: argparse.Namespace) -> int:
    if not remove_rival(repo, args.id):
        print(f"No rival with id {args.id}", file=sys.stderr)
        return 1
    return 0


def cmd_list(repo: ProfileRepository, args: argparse.Namespace) -> int:
    for profile in repo.all():
        handles = ", ".join(f"{p.value}={profile.handles[p]}" for p in profile.tracked_platforms())
        print(f"{profile.id}  {profile.display_name}  [{handles}]")
    return 0


def cmd_sync(repo: ProfileRepository, args: argparse.Namespace) -> int:
    if args.id:
        try:
            reports = [sync_rival(repo, args.id)]
        except KeyError:
            print(f"No rival with id {args.id}", file=sys.stderr)
            return 1
    else:
        reports = sync_all(repo, progress=True)

    failed = 0
    for report in reports:
        for platform, err in report.failures.items():
            failed += 1
            print(f"{report.profile_id} {platform.value}: {type(err).__name__}: {err}", file=sys.stderr)
    logger.info("Sync complete: %d rivals, %d platform failures", len(reports), failed)
    return 1 if failed else 0


def cmd_log(repo: ProfileRepository, args: argparse.Namespace) -> int:
    try:
        log_manual_solve(repo, args.id, args.date, args.note or "")
    except KeyError:
        print(f"No rival with id {args.id}", file=sys.stderr)
        return 1
    return 0


def cmd_rank(repo: ProfileRepository, args: argparse.Namespace) -> int:
    now = datetime.now()
    ranked = rank_profiles(repo.all(), now)
    for idx, entry in enumerate(ranked, start=1):
        print(f"{idx:>3}. {entry.display_name:<24} {entry.weekly_score:>4}")
    path = write_markdown_report(ranked, current_window(now), args.output)
    logger.info("Ranking written → %s", path)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Weekly competitive-programming rivalry tracker")
    sub = parser.add_subparsers(dest="command", required=True)

    def handle_flags(p: argparse.ArgumentParser) -> None:
        p.add_argument("--codeforces", help="Codeforces handle or profile URL ('' to stop tracking)")
        p.add_argument("--leetcode", help="LeetCode handle or profile URL ('' to stop tracking)")

    p = sub.add_parser("add", help="Track a new rival")
    p.add_argument("name")
    handle_flags(p)
    p.set_defaults(func=cmd_add)

    p = sub.add_parser("edit", help="Rename a rival or change handles")
    p.add_argument("id")
    p.add_argument("--name")
    handle_flags(p)
    p.set_defaults(func=cmd_edit)

    p = sub.add_parser("remove", help="Stop tracking a rival")
    p.add_argument("id")
    p.set_defaults(func=cmd_remove)

    p = sub.add_parser("list", help="List tracked rivals")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("sync", help="Refresh platform data (all rivals if no id)")
    p.add_argument("id", nargs="?")
    p.set_defaults(func=cmd_sync)

    p = sub.add_parser("log", help="Record a manual solve")
    p.add_argument("id")
    p.add_argument("--date", type=date.fromisoformat, help="YYYY-MM-DD, default today")
    p.add_argument("--note")
    p.set_defaults(func=cmd_log)

    p = sub.add_parser("rank", help="Print this week's ranking and write the report")
    p.add_argument("--output", help=f"report path (default {config.REPORT_PATH})")
    p.set_defaults(func=cmd_rank)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    repo = ProfileRepository()
    return args.func(repo, args)


if __name__ == "__main__":
    sys.exit(main())
