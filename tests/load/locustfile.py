"""
Load Tests for Beer Service

Run with: locust -f tests/load/locustfile.py --headless -u 50 -r 5 --run-time 2m --host http://localhost:8080

Set BEERS_EMIT_DELAY=0s on the service, otherwise every GET /beers takes one
second per catalog entry.
"""

import random
import string
from locust import HttpUser, task, between, events


class CatalogUser(HttpUser):
    """Reads the catalog and occasionally adds a beer."""

    wait_time = between(0.1, 0.5)

    def on_start(self):
        self.next_id = random.randint(1000, 1_000_000)

    @task(10)
    def list_beers(self):
        with self.client.get(
            "/beers",
            catch_response=True,
            name="GET /beers"
        ) as response:
            if response.status_code != 200:
                response.failure(f"Failed: {response.status_code}")
            elif not isinstance(response.json(), list):
                response.failure("Response is not a JSON array")
            else:
                response.success()

    @task(2)
    def add_beer(self):
        beer = {
            "id": self.next_id,
            "name": f"Load Test {self._generate_suffix()}",
            "brewery": "Locust Brewing",
        }
        self.next_id += 1

        with self.client.post(
            "/beers",
            json=beer,
            catch_response=True,
            name="POST /beers"
        ) as response:
            if response.status_code == 200:
                response.success()
            else:
                response.failure(f"Failed: {response.status_code}")

    @task(1)
    def health_check(self):
        with self.client.get(
            "/health",
            catch_response=True,
            name="GET /health"
        ) as response:
            if response.status_code == 200:
                response.success()
            else:
                response.failure(f"Unhealthy: {response.status_code}")

    def _generate_suffix(self):
        return ''.join(random.choices(string.ascii_lowercase + string.digits, k=8))


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("="*60)
    print("Beer Service Load Test")
    print("="*60)


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    print("="*60)
    print("Load Test Complete")
    print("="*60)
