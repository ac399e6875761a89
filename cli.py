#!/usr/bin/env python3
"""Unified CLI for the care dashboard.

Usage:
    python cli.py serve --help
    python cli.py summary
    python cli.py seed [file.yml]
    python cli.py token staff@example.com
"""
import argparse
import asyncio
import logging
import os
import sys
import time
from datetime import timedelta
from pathlib import Path

import yaml

DEFAULT_SEED_FILE = Path(__file__).parent / "modules" / "store" / "seed_data.yml"


def cmd_serve(args, config):
    import uvicorn

    if args.config:
        # the app factory loads its own config
        os.environ["CONFIG_PATH"] = args.config

    uvicorn.run(
        "modules.dashboard.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=config.log_level.lower(),
    )


def cmd_summary(args, config):
    from modules.dashboard import Dashboard
    from modules.store import create_store
    from modules.submissions import ProjectionState

    store = create_store(config.store)
    try:
        dashboard = Dashboard(store, mailer=None, config=config)
        with dashboard.running():
            # remote feeds deliver their first snapshot asynchronously
            deadline = time.monotonic() + args.timeout
            while time.monotonic() < deadline and any(
                p.snapshot.state is ProjectionState.LOADING
                for p in dashboard.projections.values()
            ):
                time.sleep(0.1)

            summary = dashboard.surface.summary
            print(f"📬 {summary.caption}")
            for kind, projection in dashboard.projections.items():
                snapshot = projection.snapshot
                if snapshot.feed_unavailable:
                    print(f"   {kind.value:<13} unavailable ({snapshot.error})")
                else:
                    print(f"   {kind.value:<13} {snapshot.counts.unread} unread / {snapshot.counts.total} total")
            return 1 if summary.feeds_unavailable else 0
    finally:
        store.close()


def cmd_seed(args, config):
    from modules.store import create_store

    path = Path(args.file) if args.file else DEFAULT_SEED_FILE
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    targets = {
        "applications": config.store.applications_collection,
        "inquiries": config.store.inquiries_collection,
    }
    store = create_store(config.store)
    try:
        for key, collection in targets.items():
            for doc in data.get(key) or []:
                doc_id = asyncio.run(store.add_document(collection, dict(doc)))
                print(f"   + {collection}/{doc_id} {doc.get('fullName', '')}")
    finally:
        store.close()
    print(f"🌱 Seeded from {path}")
    return 0


def cmd_token(args, config):
    from common.auth import create_access_token

    token = create_access_token(
        args.email,
        config.auth,
        admin=not args.no_admin,
        expires_delta=timedelta(days=args.days) if args.days else None,
    )
    print(token)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Care Dashboard - applications & inquiries',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python cli.py serve --port 8000
  python cli.py summary
  python cli.py seed
  python cli.py token admin@goldenserenityhomecare.org --days 7
"""
    )
    parser.add_argument('--config', help='Config file (default: $CONFIG_PATH or config/dashboard.yml)')
    sub = parser.add_subparsers(dest='command', required=True)

    serve = sub.add_parser('serve', help='Run the API server')
    serve.add_argument('--host', default='127.0.0.1')
    serve.add_argument('--port', type=int, default=8000)
    serve.add_argument('--reload', action='store_true')

    summary = sub.add_parser('summary', help='Print unread/total counts')
    summary.add_argument('--timeout', type=float, default=10.0, help='Seconds to wait for the feeds')

    seed = sub.add_parser('seed', help='Load sample submissions')
    seed.add_argument('file', nargs='?', help='YAML file with applications/inquiries lists')

    token = sub.add_parser('token', help='Issue a staff access token')
    token.add_argument('email')
    token.add_argument('--days', type=int, help='Validity in days (default from config)')
    token.add_argument('--no-admin', action='store_true', help='Issue a token without the admin claim')

    args = parser.parse_args(argv)

    from modules.dashboard.app import LOG_FORMAT
    from modules.dashboard.config import reload_config
    config = reload_config(args.config)
    logging.basicConfig(level=config.log_level.upper(), format=LOG_FORMAT)

    commands = {
        'serve': cmd_serve,
        'summary': cmd_summary,
        'seed': cmd_seed,
        'token': cmd_token,
    }
    return commands[args.command](args, config) or 0


if __name__ == '__main__':
    sys.exit(main())
