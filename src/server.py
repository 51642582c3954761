"""Protean Engine runner for the storefront domain.

Starts Engine workers that process events asynchronously in production:
- OutboxProcessor: polls outbox table, publishes events to Redis Streams
- StreamSubscriptions: reads Redis Streams, invokes event handlers such as
  the paid-order fulfillment submission

Usage:
    python src/server.py
    python src/server.py --test-mode   # process pending messages, then exit
"""

import argparse
import asyncio

from protean.server.engine import Engine


async def run(test_mode: bool = False):
    from storefront.domain import storefront

    storefront.init()
    engine = Engine(storefront, test_mode=test_mode)
    await engine.run()


def main():
    parser = argparse.ArgumentParser(description="Storefront Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending messages and exit",
    )
    args = parser.parse_args()

    asyncio.run(run(test_mode=args.test_mode))


if __name__ == "__main__":
    main()
