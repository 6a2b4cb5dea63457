# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest

import httpx
from fastapi.testclient import TestClient

PRODUCTS = [
    {
        "id": "3017620422003",
        "product_name": "Nutella",
        "brands": " , Ferrero, Nutella",
        "serving_size": "15 g",
        "serving_quantity": 15,
        "nutriments": {"energy-kcal_serving": 80, "energy-kcal_100g": "539"},
    },
    {
        "_id": "123",
        "generic_name": "Hazelnut spread",
        "nutriments": {"energy_100g": 2252},
    },
    {"id": "no-name", "nutriments": {}},
    {"product_name": "no id"},
]


class TestMapProduct(unittest.TestCase):
    def test_maps_names_brands_and_calories(self) -> None:
        from harufit.foods.openfoodfacts import map_product

        item = map_product(PRODUCTS[0])
        self.assertEqual(item["id"], "3017620422003")
        self.assertEqual(item["name"], "Nutella")
        self.assertEqual(item["brand"], "Ferrero")
        self.assertEqual(item["caloriesPerServing"], 80.0)
        self.assertEqual(item["caloriesPer100g"], 539.0)

    def test_kilojoules_are_converted(self) -> None:
        from harufit.foods.openfoodfacts import map_product

        item = map_product(PRODUCTS[1])
        self.assertEqual(item["id"], "123")
        self.assertEqual(item["name"], "Hazelnut spread")
        self.assertAlmostEqual(item["caloriesPer100g"], 2252 / 4.184)
        self.assertIsNone(item["caloriesPerServing"])
        self.assertIsNone(item["brand"])

    def test_products_without_id_or_name_are_dropped(self) -> None:
        from harufit.foods.openfoodfacts import map_product

        self.assertIsNone(map_product(PRODUCTS[2]))
        self.assertIsNone(map_product(PRODUCTS[3]))


class TestFoodLookupRoute(unittest.TestCase):
    def setUp(self) -> None:
        from harufit.api import app  # noqa: WPS433
        from harufit.config import settings
        from harufit.foods.api import get_lookup_client
        from harufit.foods.openfoodfacts import OpenFoodFactsClient

        self.seen = []
        self.status = 200

        def handler(request: httpx.Request) -> httpx.Response:
            self.seen.append(request)
            if self.status != 200:
                return httpx.Response(self.status, text="upstream down")
            return httpx.Response(200, json={"count": len(PRODUCTS), "products": PRODUCTS})

        self.app = app
        self.dependency = get_lookup_client
        app.dependency_overrides[get_lookup_client] = lambda: OpenFoodFactsClient(
            settings, transport=httpx.MockTransport(handler)
        )
        self.client = TestClient(app)

    def tearDown(self) -> None:
        self.app.dependency_overrides.pop(self.dependency, None)
        self.client.close()

    def test_lookup(self) -> None:
        resp = self.client.get("/food-search", params={"query": "nutella", "language": "fr", "limit": 50})
        self.assertEqual(resp.status_code, 200)
        payload = resp.json()
        self.assertEqual(payload["total"], 2)
        self.assertEqual(payload["items"][0]["servingSize"], "15 g")
        self.assertNotIn("brand", payload["items"][1])

        params = self.seen[0].url.params
        self.assertEqual(params["search_terms"], "nutella")
        self.assertEqual(params["lc"], "fr")
        self.assertEqual(params["page_size"], "25")
        self.assertEqual(self.seen[0].headers["user-agent"], "HaruFit/1.0")

    def test_short_query_skips_upstream(self) -> None:
        resp = self.client.get("/food-search", params={"q": " n "})
        self.assertEqual(resp.json(), {"items": [], "total": 0})
        self.assertEqual(self.seen, [])

    def test_upstream_failure(self) -> None:
        self.status = 503
        resp = self.client.get("/food-search", params={"q": "nutella"})
        self.assertEqual(resp.status_code, 502)
        self.assertEqual(resp.json(), {"error": "Failed to fetch food data from upstream service."})


if __name__ == "__main__":
    unittest.main()
