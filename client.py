"""CLI entry point for the UDP log client."""

import argparse
import logging
import sys

from log_truck.client import UDPLogClient


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
        stream=sys.stderr,
    )

    parser = argparse.ArgumentParser(description="Send sample logs to a log truck")
    parser.add_argument("--target", default="127.0.0.1:5000", help="hostname:port of the log truck")
    parser.add_argument("--count", type=int, default=20, help="Number of logs to send")
    parser.add_argument("--text", action="store_true", help="Send plain text lines instead of JSON")
    parser.add_argument("--app", default="log-truck-client", help="Application name")
    args = parser.parse_args()

    client = UDPLogClient(args.target, args.app)
    try:
        client.generate_sample_logs(args.count, text=args.text)
    finally:
        client.close()


if __name__ == "__main__":
    main()
