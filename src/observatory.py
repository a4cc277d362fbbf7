"""Furnishop Observatory — real-time message flow observability.

Uses Protean's built-in Observatory server to provide a live dashboard,
Prometheus metrics, and REST API for monitoring the event pipeline
across the Storefront, Support and Identity domains.

Usage:
    uvicorn observatory:app --app-dir src --host 0.0.0.0 --port 9000
"""

from protean.server.observatory import create_observatory_app

from identity.domain import identity
from storefront.domain import storefront
from support.domain import support

identity.init()
storefront.init()
support.init()

app = create_observatory_app(
    domains=[storefront, support, identity],
    title="Furnishop Observatory",
)
