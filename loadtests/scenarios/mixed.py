"""Mixed workload scenario.

Combines the catalog, identity and ordering journeys with weights that
model a furniture shop's traffic: many more visitors browse than buy.
This is the recommended scenario for load baseline testing.
"""

from locust import HttpUser, between

from loadtests.scenarios.catalog import BrowseCatalogJourney, CatalogAdminJourney, SearchJourney
from loadtests.scenarios.identity import NewAccountJourney
from loadtests.scenarios.ordering import (
    CancelOrderJourney,
    GuestCheckoutJourney,
    MemberCheckoutJourney,
    OrderFulfilmentJourney,
)


class MixedWorkloadUser(HttpUser):
    """Realistic mixed workload simulating concurrent storefront activity.

    Weight distribution:

    Catalog (60%):
    - Browsing and product detail: by far the most common
    - Search and suggestions: frequent
    - Admin catalog edits: rare

    Identity (10%):
    - Sign-ups with login and profile edits

    Ordering (30%):
    - Guest COD checkout and tracking: most common purchase path
    - Member cart-to-checkout: frequent
    - Admin fulfilment: occasional
    - Customer cancellation: least frequent

    Order placement and cancellation touch the same product rows as
    browsing, which exercises stock reservation under contention.
    """

    wait_time = between(0.5, 3.0)
    tasks = {
        # Catalog (60%)
        BrowseCatalogJourney: 40,
        SearchJourney: 17,
        CatalogAdminJourney: 3,
        # Identity (10%)
        NewAccountJourney: 10,
        # Ordering (30%)
        GuestCheckoutJourney: 14,
        MemberCheckoutJourney: 8,
        OrderFulfilmentJourney: 5,
        CancelOrderJourney: 3,
    }
