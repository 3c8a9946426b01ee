import os
import random

from locust import HttpUser, task, between

MANAGER_EMAIL = os.getenv("MANAGER_EMAIL", "manager@logitrack.local")
MANAGER_PASSWORD = os.getenv("MANAGER_PASSWORD", "Pass@word1!")


class ApiUser(HttpUser):
    wait_time = between(0.1, 0.5)

    def on_start(self):
        r = self.client.post("/api/auth/login", json={"email": MANAGER_EMAIL, "password": MANAGER_PASSWORD})
        token = r.json().get("token") if r.status_code == 200 else None
        self.headers = {"Authorization": f"Bearer {token}"} if token else {}
        self.order_ids = []

    @task(5)
    def list_inventory(self):
        # mostly cache hits; X-Cache-Hit shows the ratio
        self.client.get("/api/inventory", headers=self.headers)

    @task(3)
    def get_order(self):
        if not self.order_ids:
            return
        oid = random.choice(self.order_ids)
        self.client.get(f"/api/orders/{oid}", headers=self.headers, name="/api/orders/[id]")

    @task(1)
    def create_order(self):
        body = {
            "customerName": f"customer_{random.randint(1, 1_000_000)}",
            "items": [{"name": "Box", "quantity": random.randint(1, 20), "location": "A1"}],
        }
        r = self.client.post("/api/orders", json=body, headers=self.headers)
        if r.status_code == 201:
            self.order_ids.append(r.json()["orderId"])

    @task(1)
    def create_item(self):
        body = {"name": "Shrink Wrap", "quantity": random.randint(1, 50), "location": "Dock 2"}
        self.client.post("/api/inventory", json=body, headers=self.headers)
