"""Entry point for running the Clue Bowl server."""

import argparse
import asyncio
import logging

from .core.server import run_server


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Clue Bowl chat server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run on default port (8000) without SSL
  python -m cluebowl

  # Run on custom port with one-minute turns
  python -m cluebowl --port 9000 --turn-seconds 60

  # Run with SSL (WSS) using Let's Encrypt certificates
  python -m cluebowl --ssl-cert /etc/letsencrypt/live/example.com/fullchain.pem \\
                     --ssl-key /etc/letsencrypt/live/example.com/privkey.pem
""",
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host address to bind to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port number to listen on (default: 8000)",
    )
    parser.add_argument(
        "--turn-seconds",
        dest="turn_seconds",
        type=int,
        default=90,
        help="How long each performer's turn lasts (default: 90)",
    )
    parser.add_argument(
        "--locales-dir",
        dest="locales_dir",
        help="Directory of .ftl message files (default: bundled locales)",
    )
    parser.add_argument(
        "--ssl-cert",
        dest="ssl_cert",
        help="Path to SSL certificate file (enables WSS). For Let's Encrypt, use fullchain.pem",
    )
    parser.add_argument(
        "--ssl-key",
        dest="ssl_key",
        help="Path to SSL private key file. For Let's Encrypt, use privkey.pem",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    args = parser.parse_args()

    # Validate SSL arguments
    if (args.ssl_cert and not args.ssl_key) or (args.ssl_key and not args.ssl_cert):
        parser.error("Both --ssl-cert and --ssl-key must be provided together")
    if args.turn_seconds <= 0:
        parser.error("--turn-seconds must be positive")

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    protocol = "wss" if args.ssl_cert else "ws"
    print(f"Starting Clue Bowl server on {protocol}://{args.host}:{args.port}")

    try:
        asyncio.run(
            run_server(
                host=args.host,
                port=args.port,
                locales_dir=args.locales_dir,
                ssl_cert=args.ssl_cert,
                ssl_key=args.ssl_key,
                turn_duration_ms=args.turn_seconds * 1000,
            )
        )
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
