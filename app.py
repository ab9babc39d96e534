#!/usr/bin/env python3
"""
Course portal client - page-visit tracking, local data migration, visit reports.

Usage:
  python app.py login alice                # store an auth token
  python app.py replay nav.txt             # drive the tracker through a navigation script
  python app.py migrate --check            # is there local data to move?
  python app.py migrate                    # move local favorites/notes/comments to the API
  python app.py visits 42 --page-type news # admin: a user's visits
  python app.py stats                      # admin: site-wide stats

Navigation script, one step per line ("#" starts a comment):
  0    go /news
  12   go /news/42?ref=feed
  30   hide
  95   show
  120  unload
"""

import argparse
import getpass
import json
import logging
import sys
import time
from dataclasses import dataclass
from typing import Optional

import config
from api import ApiClient, ApiError
from data_schema import PageVisit
from page_tracker import PageEnvironment, TrackerProvider, VisitDispatcher
from page_tracker.classifier import split_path
from storage import LocalStore, dismiss_migration, is_migration_needed, migrate_local_data

NAV_ACTIONS = ("go", "hide", "show", "unload")

DEFAULT_USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64) course-portal-client"


@dataclass
class NavStep:
    at: float
    action: str
    path: Optional[str] = None
    title: Optional[str] = None


def parse_nav_script(text: str) -> list[NavStep]:
    """Parse "<offset> <action> [path] [title...]" lines. Offsets must not go backwards."""
    steps: list[NavStep] = []
    for lineno, raw in enumerate(text.splitlines(), 1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        parts = line.split(None, 3)
        if len(parts) < 2:
            raise ValueError(f"line {lineno}: expected '<offset> <action> [path]'")
        try:
            at = float(parts[0])
        except ValueError:
            raise ValueError(f"line {lineno}: bad offset {parts[0]!r}") from None
        action = parts[1].lower()
        if action not in NAV_ACTIONS:
            raise ValueError(f"line {lineno}: unknown action {parts[1]!r}")
        if action == "go" and len(parts) < 3:
            raise ValueError(f"line {lineno}: 'go' needs a path")
        if steps and at < steps[-1].at:
            raise ValueError(f"line {lineno}: offset {at} is before {steps[-1].at}")
        steps.append(NavStep(
            at=at,
            action=action,
            path=parts[2] if len(parts) > 2 else None,
            title=parts[3] if len(parts) > 3 else None,
        ))
    return steps


class ReplayClock:
    """Clock that only moves when told to, so a replay takes no wall time."""

    def __init__(self, start: Optional[float] = None):
        self.start = time.time() if start is None else start
        self.now = self.start

    def __call__(self) -> float:
        return self.now

    def advance_to(self, offset: float) -> None:
        self.now = self.start + offset


def replay(steps: list[NavStep], env: PageEnvironment, provider: TrackerProvider, clock: ReplayClock) -> None:
    """Feed steps through the environment. Navigation reaches the tracker via the navigate event."""
    env.add_listener("navigate", provider.track_page)
    try:
        for step in steps:
            clock.advance_to(step.at)
            if step.action == "go":
                pathname, search = split_path(step.path)
                env.navigate(pathname, search, title=step.title)
            elif step.action == "hide":
                env.set_hidden(True)
            elif step.action == "show":
                env.set_hidden(False)
            elif step.action == "unload":
                env.unload()
    finally:
        env.remove_listener("navigate", provider.track_page)


def _make_client() -> ApiClient:
    return ApiClient(config.PORTAL_API_URL, store=LocalStore(config.STORE_PATH))


def cmd_login(args) -> int:
    client = _make_client()
    password = args.password or getpass.getpass("Password: ")
    try:
        data = client.login(args.username, password)
    except ApiError as e:
        print(f"Login failed: {e}")
        return 1
    user = (data or {}).get("user") or {}
    print(f"Logged in as {user.get('username', args.username)}")
    return 0


def cmd_logout(args) -> int:
    client = _make_client()
    try:
        client.logout()
    except ApiError as e:
        print(f"  Logout request failed ({e}); local token cleared")
    print("Logged out")
    return 0


def cmd_replay(args) -> int:
    try:
        with open(args.script, encoding="utf-8") as f:
            steps = parse_nav_script(f.read())
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    client = _make_client()
    dispatcher = VisitDispatcher(client)
    clock = ReplayClock()
    env = PageEnvironment(user_agent=args.user_agent, referrer=args.referrer or "")
    provider = TrackerProvider(env, dispatcher, clock=clock)

    tracker = provider.init()
    print(f"Replaying {len(steps)} steps -> {config.PORTAL_API_URL}")
    print(f"  Session: {tracker.session_id}")
    replay(steps, env, provider, clock)
    provider.destroy()
    dispatcher.close(wait=True)
    print("Done.")
    return 0


def cmd_migrate(args) -> int:
    store = LocalStore(config.STORE_PATH)
    if args.dismiss:
        dismiss_migration(store)
        print("Migration dismissed.")
        return 0
    needed = is_migration_needed(store)
    if args.check:
        print("Migration needed." if needed else "Nothing to migrate.")
        return 0
    if not needed:
        print("Nothing to migrate.")
        return 0

    client = ApiClient(config.PORTAL_API_URL, store=store)
    result = migrate_local_data(store, client)
    print(
        f"Migrated: {result.favorites_count} favorites, "
        f"{result.notes_count} notes, {result.comments_count} comments."
    )
    if not result.success:
        print("Errors:")
        for err in result.errors:
            print(f"  - {err}")
        return 1
    return 0


def format_visit_row(row: dict) -> str:
    """One line of the visits report from a /analytics/user/<id>/visits row."""
    visit = PageVisit.from_dict(row)
    page_type = visit.page_type.value if visit.page_type else "-"
    spent = visit.time_spent_seconds if visit.time_spent_seconds is not None else "-"
    return f"  {row.get('visited_at', '?')}  {page_type:<12} {visit.page_path}  {spent}s"


def cmd_visits(args) -> int:
    client = _make_client()
    try:
        data = client.get_user_visits(
            args.user_id,
            limit=args.limit,
            offset=args.offset,
            page_type=args.page_type,
            start_date=args.start_date,
            end_date=args.end_date,
        )
    except ApiError as e:
        print(f"Error: {e}")
        return 1
    if args.json:
        print(json.dumps(data, indent=2, ensure_ascii=False))
        return 0
    stats = data.get("statistics", {})
    print(
        f"User {args.user_id}: {stats.get('total_visits', 0)} visits, "
        f"{stats.get('unique_pages', 0)} pages, {stats.get('unique_sessions', 0)} sessions, "
        f"avg {float(stats.get('avg_time_spent') or 0):.0f}s"
    )
    for v in data.get("visits", []):
        print(format_visit_row(v))
    return 0


def cmd_stats(args) -> int:
    client = _make_client()
    try:
        data = client.get_analytics_stats(start_date=args.start_date, end_date=args.end_date)
    except ApiError as e:
        print(f"Error: {e}")
        return 1
    print(json.dumps(data, indent=2, ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Course portal client - page tracking, migration, visit reports")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging (shows dropped deliveries)")
    sub = p.add_subparsers(dest="command", required=True)

    sp = sub.add_parser("login", help="Log in and store the auth token")
    sp.add_argument("username")
    sp.add_argument("--password", default=None, help="Default: prompt")
    sp.set_defaults(func=cmd_login)

    sp = sub.add_parser("logout", help="Log out and clear the stored token")
    sp.set_defaults(func=cmd_logout)

    sp = sub.add_parser("replay", help="Drive the page tracker through a navigation script")
    sp.add_argument("script", help="Path to navigation script")
    sp.add_argument("--user-agent", default=DEFAULT_USER_AGENT)
    sp.add_argument("--referrer", default=None)
    sp.set_defaults(func=cmd_replay)

    sp = sub.add_parser("migrate", help="Move local favorites/notes/comments to the API")
    sp.add_argument("--check", action="store_true", help="Only report whether migration is needed")
    sp.add_argument("--dismiss", action="store_true", help="Stop offering the migration")
    sp.set_defaults(func=cmd_migrate)

    for name, func, help_text in (
        ("visits", cmd_visits, "Admin: list a user's page visits"),
        ("stats", cmd_stats, "Admin: site-wide visit stats"),
    ):
        sp = sub.add_parser(name, help=help_text)
        if name == "visits":
            sp.add_argument("user_id", type=int)
            sp.add_argument("--limit", type=int, default=50)
            sp.add_argument("--offset", type=int, default=0)
            sp.add_argument("--page-type", default=None)
            sp.add_argument("--json", action="store_true", help="Raw JSON output")
        sp.add_argument("--start-date", default=None)
        sp.add_argument("--end-date", default=None)
        sp.set_defaults(func=func)

    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.DEBUG if (args.verbose or config.DEBUG) else getattr(logging, config.LOG_LEVEL, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
