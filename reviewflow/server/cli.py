"""
Command-line interface for the remote skills server.
"""

import argparse
import sys


def main():
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="reviewflow-skills-server",
        description="ReviewFlow Skills Server - Execute KYC skills over HTTP",
    )

    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=4010,
        help="Port to bind to (default: 4010)",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Log level (default: info)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 1.0.0",
    )

    args = parser.parse_args()

    from .app import SkillServer

    print(f"""
ReviewFlow Skills Server v1.0.0
  Host: {args.host}
  Port: {args.port}

Health check: http://{args.host}:{args.port}/health
Skill endpoint: POST http://{args.host}:{args.port}/skills/execute

Press Ctrl+C to stop the server.
""")

    try:
        server = SkillServer(host=args.host, port=args.port, log_level=args.log_level)
        server.run()
    except KeyboardInterrupt:
        print("\nServer stopped.")
        sys.exit(0)


if __name__ == "__main__":
    main()
