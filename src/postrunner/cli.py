"""
PostRunner CLI

Command-line interface for flattening and replaying API collections.

Commands:
    serve   - Start the HTTP server
    list    - Print the flattened requests of collection files
    run     - Execute collection files sequentially

Examples:
    # Start the server
    postrunner serve --port 5000

    # Show global ids
    postrunner list users.json

    # Run every request with a fresh token
    postrunner run users.json orders.json --token abc123 --output results.json
"""

import argparse
import json
import sys
from typing import List, Optional

from .collection import CollectionLoader, CollectionStore
from .common.errors import PostRunnerError
from .common.utils import setup_logging
from .config import RunnerConfig
from .runner import BatchRunner, BatchSummary, BatchTarget, RequestExecutor


def _load_config(args) -> RunnerConfig:
    try:
        return RunnerConfig.load(args.config)
    except (OSError, ValueError) as e:
        print(f"❌ Failed to load config: {e}")
        sys.exit(1)


def _register(paths: List[str]) -> CollectionStore:
    store = CollectionStore()
    try:
        store.register_batch(CollectionLoader.load_files(paths))
    except PostRunnerError as e:
        print(f"❌ Failed to load collections: {e}")
        sys.exit(1)
    return store


def cmd_serve(args):
    """
    Start the HTTP server.

    Args:
        args: Parsed command-line arguments
    """
    from .server import RunnerServer

    config = _load_config(args)
    print(f"🚀 PostRunner server starting on http://{args.host or config.host}:{args.port or config.port}")

    try:
        RunnerServer(config=config).start(host=args.host, port=args.port)
    except KeyboardInterrupt:
        print("\n\n👋 Server stopped")


def cmd_list(args):
    """
    Print the flattened requests of each collection.

    Args:
        args: Parsed command-line arguments
    """
    store = _register(args.files)

    for collection in store.all():
        count = len(collection.items or [])
        print(f"📁 [{collection.id}] {collection.name} ({count} requests)")
        if collection.token:
            print(f"   🔑 Token: {collection.token[:8]}...")
        for item in collection.items or []:
            print(f"   {item.method or '?':7} {item.global_id}")
        print()


def cmd_run(args):
    """
    Execute collection requests sequentially and report results.

    Args:
        args: Parsed command-line arguments
    """
    config = _load_config(args)
    store = _register(args.files)

    if args.token is not None:
        for collection in store.all():
            store.update_token(collection.id, args.token)

    runner = BatchRunner(
        store,
        executor=RequestExecutor(
            verify_ssl=config.verify_ssl and not args.no_verify_ssl,
            substitute_variables=config.substitute_variables
        ),
        request_timeout=config.request_timeout,
        bulk_timeout=args.timeout if args.timeout is not None else config.bulk_timeout
    )

    targets = [
        BatchTarget(collection_id=c.id, global_ids=args.only)
        for c in store.all()
    ]

    print(f"📡 Running {len(targets)} collections")
    print()

    records = []
    for record in runner.iter_batch(targets):
        records.append(record)
        icon = "✅" if record.ok else "❌"
        print(f"{icon} {record.method} {record.url} → {record.status}  [{record.collection_name}] {record.api_name}")
        if args.verbose and not record.ok:
            print(f"   {record.data}")

    summary = BatchSummary.from_records(records)
    print()
    print(f"📊 Summary:")
    print(f"   Total: {summary.total}")
    print(f"   Succeeded: {summary.succeeded} ({summary.success_rate:.1f}%)")
    print(f"   Failed: {summary.failed}")

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            json.dump({'responses': [r.to_dict() for r in records]}, f, indent=2)
        print(f"✅ Saved results to {args.output}")

    if summary.failed > 0:
        sys.exit(1)


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog='postrunner',
        description="PostRunner - flatten API collections and replay their requests",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s serve --port 5000
  %(prog)s list users.json
  %(prog)s run users.json --token abc123 --output results.json
        """
    )
    parser.add_argument('-c', '--config', help='YAML configuration file')
    parser.add_argument('--log-level', choices=['debug', 'info', 'warning', 'error'],
                        help='Log level (default: from config)')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # --- SERVE command ---
    serve_parser = subparsers.add_parser('serve', help='Start the HTTP server')
    serve_parser.add_argument('--host', help='Host to bind (default: 127.0.0.1)')
    serve_parser.add_argument('-p', '--port', type=int, help='Port to bind (default: 5000)')

    # --- LIST command ---
    list_parser = subparsers.add_parser('list', help='List flattened requests')
    list_parser.add_argument('files', nargs='+', help='Collection JSON files')

    # --- RUN command ---
    run_parser = subparsers.add_parser('run', help='Execute collection requests')
    run_parser.add_argument('files', nargs='+', help='Collection JSON files')
    run_parser.add_argument('-t', '--token', help='Bearer token applied to every collection')
    run_parser.add_argument('--only', nargs='+', help='Only run these global ids')
    run_parser.add_argument('--timeout', type=float, help='Per-request timeout in seconds (default: none)')
    run_parser.add_argument('--no-verify-ssl', action='store_true', help='Disable SSL verification')
    run_parser.add_argument('-o', '--output', help='Save results to JSON file')
    run_parser.add_argument('--verbose', action='store_true', help='Print failure details')

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.log_level or ('info' if args.command == 'serve' else 'warning'))

    if args.command == 'serve':
        cmd_serve(args)
    elif args.command == 'list':
        cmd_list(args)
    elif args.command == 'run':
        cmd_run(args)


if __name__ == '__main__':
    main()
