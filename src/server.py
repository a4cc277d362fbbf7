"""Protean Engine runner for Furnishop domains.

Starts Engine workers that process events asynchronously:
- OutboxProcessor: polls outbox table, publishes events to Redis Streams
- StreamSubscriptions: reads Redis Streams, invokes projectors and event handlers

Usage:
    python src/server.py                      # Run every domain engine
    python src/server.py --domain storefront  # Run only the storefront engine
"""

import argparse
import asyncio

from protean.server.engine import Engine

DOMAIN_NAMES = ["storefront", "support", "identity"]


def _get_domain(name):
    """Import and initialize a domain by name."""
    if name == "storefront":
        from storefront.domain import storefront

        storefront.init()
        return storefront
    elif name == "support":
        from support.domain import support

        support.init()
        return support
    elif name == "identity":
        from identity.domain import identity

        identity.init()
        return identity
    else:
        raise ValueError(f"Unknown domain: {name}")


async def run(domain_names):
    engines = []
    for name in domain_names:
        domain = _get_domain(name)
        engines.append(Engine(domain))

    await asyncio.gather(*(engine.run() for engine in engines))


def main():
    parser = argparse.ArgumentParser(description="Furnishop Engine runner")
    parser.add_argument(
        "--domain",
        choices=DOMAIN_NAMES,
        help="Run a single domain engine (default: run all)",
    )
    args = parser.parse_args()

    domain_names = [args.domain] if args.domain else DOMAIN_NAMES

    asyncio.run(run(domain_names))


if __name__ == "__main__":
    main()
