"""Mixed storefront workload scenario.

Combines the browsing, shopping and staff journeys with weights that
model realistic storefront traffic. This is the recommended scenario for
a load baseline.
"""

from locust import HttpUser, between

from loadtests.scenarios.storefront import BrowsingJourney, ShopperJourney, StaffJourney


class MixedWorkloadUser(HttpUser):
    """Realistic mixed workload.

    Browsing (60%): anonymous catalog traffic, read-only.
    Shopping (30%): carts, promos and checkouts contending for stock.
    Staff (10%): catalog and promo seeding, order fulfilment.
    """

    wait_time = between(0.5, 3.0)
    tasks = {
        BrowsingJourney: 6,
        ShopperJourney: 3,
        StaffJourney: 1,
    }
