"""API server CLI"""

import argparse
import sys
import asyncio
import signal
import logging
from ..config import db_path, load_config
from ..db.store import SqliteStatsStore
from ..db.writer import StatsWriter
from ..logging_setup import setup_logging
from ..trainer.scheduler import TrainingScheduler
from ..api.server import APIServer


async def main():
    """Main entry point for blackjack-api"""
    setup_logging(overwrite=False)
    parser = argparse.ArgumentParser(
        description="Start Blackjack Coach local API server"
    )

    parser.add_argument(
        '--host',
        default='127.0.0.1',
        help='Host to bind to (default: 127.0.0.1, loopback only)'
    )

    parser.add_argument(
        '--port',
        type=int,
        default=0,
        help='Port to bind to (default: 0 for random available port)'
    )

    parser.add_argument(
        '--config',
        help='Configuration file path'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug mode (shows /docs endpoint)'
    )

    parser.add_argument(
        '--generate-token',
        action='store_true',
        help='Generate new API token and exit'
    )

    args = parser.parse_args()
    logger = logging.getLogger(__name__)

    if args.generate_token:
        import secrets
        new_token = secrets.token_urlsafe(32)
        print(f"Generated new API token: {new_token}")
        print("Add this to your config.toml:")
        print(f"[api]\ntoken = \"{new_token}\"")
        return

    config = load_config(args.config)

    if not config.get('feature_flags', {}).get('api', False):
        logger.error("API is disabled in configuration")
        logger.error("Set feature_flags.api = true in config.toml to enable")
        sys.exit(1)

    if args.host not in ('127.0.0.1', 'localhost', '::1'):
        logger.warning("API server only supports loopback addresses for security; forcing host to 127.0.0.1")
        args.host = '127.0.0.1'

    port = args.port or config.get('api', {}).get('port', 0)
    config['debug'] = args.debug

    writer = StatsWriter(SqliteStatsStore(db_path(config)))
    writer.start()
    try:
        scheduler = TrainingScheduler.from_config(config, store=writer)
        server = APIServer(config, scheduler)
        if not config.get('api', {}).get('token'):
            # Printed, not logged, so the token stays out of the log file
            print(f"API token: {server.token_auth.token}")

        shutdown_event = asyncio.Event()

        def signal_handler():
            logger.info("Received shutdown signal...")
            shutdown_event.set()

        if sys.platform != 'win32':
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGTERM, signal.SIGINT):
                loop.add_signal_handler(sig, signal_handler)

        server_task = asyncio.create_task(
            server.start(host=args.host, port=port)
        )

        done, pending = await asyncio.wait(
            [server_task, asyncio.create_task(shutdown_event.wait())],
            return_when=asyncio.FIRST_COMPLETED
        )

        for task in pending:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        logger.info("API server stopped")

    except KeyboardInterrupt:
        logger.info("Shutdown requested by user")
    finally:
        writer.close()


def main_sync():
    """Synchronous wrapper for async main"""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == '__main__':
    main_sync()
