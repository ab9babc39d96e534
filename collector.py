#!/usr/bin/env python3
"""
Visit collector - local sink for page-visit records during development.

Accepts the same POST body as the portal's analytics endpoint and prints each
visit, so the tracker can be exercised without the real API.

Usage:
  python collector.py --port 3001
  PORTAL_API_URL=http://localhost:3001/api python app.py replay nav.txt
"""

import argparse
import asyncio
import signal
import sys

from aiohttp import web

import config

VISITS_KEY = web.AppKey("visits", list)

_OPTIONAL_FIELDS = (
    "page_title",
    "page_type",
    "page_id",
    "referrer",
    "session_id",
    "user_agent",
    "device_type",
)


def parse_visit_body(body) -> tuple[dict | None, str | None]:
    """Validate a POSTed visit. Returns (visit, None) or (None, error)."""
    if not isinstance(body, dict):
        return None, "body must be a JSON object"
    page_path = body.get("page_path")
    if not page_path:
        return None, "page_path is required"
    visit = {"page_path": str(page_path)}
    for k in _OPTIONAL_FIELDS:
        v = body.get(k)
        visit[k] = str(v) if v else None
    try:
        time_spent = body.get("time_spent_seconds")
        visit["time_spent_seconds"] = int(time_spent) if time_spent else None
    except (TypeError, ValueError):
        return None, "time_spent_seconds must be an integer"
    return visit, None


def summarize(visits: list[dict]) -> dict:
    times = [v["time_spent_seconds"] for v in visits if v.get("time_spent_seconds") is not None]
    return {
        "total_visits": len(visits),
        "unique_pages": len({v["page_path"] for v in visits}),
        "unique_sessions": len({v["session_id"] for v in visits if v.get("session_id")}),
        "avg_time_spent": (sum(times) / len(times)) if times else 0.0,
        "total_time_spent": sum(times),
    }


def make_app(visits: list | None = None, quiet: bool = False) -> web.Application:
    app = web.Application()
    app[VISITS_KEY] = visits if visits is not None else []

    # POST /api/analytics/page-visit
    async def http_page_visit(req):
        try:
            body = await req.json()
        except Exception as e:
            return web.json_response({"error": str(e)}, status=400)
        visit, error = parse_visit_body(body)
        if error:
            return web.json_response({"error": error}, status=400)
        stored = req.app[VISITS_KEY]
        stored.append(visit)
        visit_id = len(stored)
        if not quiet:
            spent = visit["time_spent_seconds"]
            print(
                f"  [Visit #{visit_id}] {visit['page_path']} | {visit['page_type'] or '-'}"
                f"{'/' + visit['page_id'] if visit['page_id'] else ''}"
                f" | {spent if spent is not None else '…'}s | {visit['session_id'] or '?'}"
            )
        return web.json_response({"success": True, "id": visit_id}, status=201)

    # GET /api/analytics/visits - what has been collected so far
    async def http_visits(req):
        stored = req.app[VISITS_KEY]
        return web.json_response({"visits": stored, "statistics": summarize(stored)})

    app.router.add_post("/api" + config.PAGE_VISIT_ENDPOINT, http_page_visit)
    app.router.add_get("/api/analytics/visits", http_visits)
    return app


def run_collector(port: int):
    app = make_app()
    running = True

    def stop(_=None, __=None):
        nonlocal running
        running = False

    signal.signal(signal.SIGINT, stop)
    signal.signal(signal.SIGTERM, stop)

    async def main_loop():
        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, "0.0.0.0", port)
        await site.start()
        print(f"Collector on 0.0.0.0:{port}")
        print(f"  POST /api{config.PAGE_VISIT_ENDPOINT} - page visits")
        print("  GET  /api/analytics/visits - collected visits + stats\n")
        while running:
            await asyncio.sleep(0.5)
        await runner.cleanup()

    try:
        asyncio.run(main_loop())
    except KeyboardInterrupt:
        pass
    print("\nShutting down.")


def main():
    p = argparse.ArgumentParser(description="Local page-visit collector for development")
    p.add_argument("--port", type=int, default=config.COLLECTOR_PORT, help="HTTP port")
    args = p.parse_args()
    run_collector(args.port)


if __name__ == "__main__":
    main()
    sys.exit(0)
