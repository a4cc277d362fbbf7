"""Furnishop load tests.

Every user class under ``loadtests.scenarios`` is imported here so one
locustfile drives them all; pick a subset by naming classes on the command
line.

Usage:
    locust -f loadtests/locustfile.py                        # web UI, all users
    locust -f loadtests/locustfile.py CheckoutFloodUser      # stock contention
    locust -f loadtests/locustfile.py MixedWorkloadUser --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest

Admin journeys sign in with LOADTEST_ADMIN_EMAIL / LOADTEST_ADMIN_PASSWORD.
When the run stops, the failure tally is printed along with the best
sellers' sold counters, which show how far checkout contention got.
"""

import logging
import time
import requests
from locust import events

from loadtests.helpers.failures import FailureTally
from loadtests.scenarios.catalog import CatalogUser  # noqa: F401
from loadtests.scenarios.identity import IdentityUser  # noqa: F401
from loadtests.scenarios.mixed import MixedWorkloadUser  # noqa: F401
from loadtests.scenarios.ordering import OrderingUser  # noqa: F401
from loadtests.scenarios.stress import CheckoutFloodUser, SpikeUser  # noqa: F401

logger = logging.getLogger("loadtest")

failures = FailureTally()


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Tally failed requests by endpoint and reason, logging each new reason once."""
    key = failures.record(request_type, name, response, exception)
    if key:
        logger.error("%s -> %s", *key)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    failures.clear()
    print(f"\n[LOADTEST] {time.strftime('%H:%M:%S')} against {environment.host}\n")


def _best_sellers(host):
    resp = requests.get(f"{host}/products", params={"sort": "-sold", "limit": 5}, timeout=5)
    resp.raise_for_status()
    return resp.json()["items"]


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Print the failure tally and the best sellers after the run."""
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    if failures:
        print("[LOADTEST] Most frequent failures:")
        for (endpoint, reason), count in failures.most_common(10):
            print(f"  {count:>6}  {endpoint}  {reason}")

    if not environment.host:
        return
    try:
        products = _best_sellers(environment.host)
    except requests.RequestException as e:
        print(f"[LOADTEST] Could not read best sellers: {e}\n")
        return
    print("[LOADTEST] Best sellers after the run:")
    for product in products:
        stock = "in stock" if product["in_stock"] else "sold out"
        print(f"  {product['sold']:>6} sold  {product['slug']}  ({stock})")
    print()
