"""Identity load test scenarios.

A stateful SequentialTaskSet journey covering registration, login,
profile edits and a password change. Steps execute in order — each
depends on the previous step succeeding.
"""

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import fake, register_data, short_id, valid_phone
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import AccountState


class NewAccountJourney(SequentialTaskSet):
    """Register -> Login -> Me -> Update Profile -> Change Password -> Login again.

    Passwords are hashed with bcrypt, so register and both logins are the
    CPU-heavy requests of this journey.
    """

    def on_start(self):
        self.state = AccountState()

    @task
    def register(self):
        payload = register_data()
        with self.client.post(
            "/auth/register",
            json=payload,
            catch_response=True,
            name="POST /auth/register",
        ) as resp:
            if resp.status_code == 201:
                self.state.user_id = resp.json()["user_id"]
                self.state.email = payload["email"]
                self.state.password = payload["password"]
            else:
                resp.failure(f"Registration failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def login(self):
        with self.client.post(
            "/auth/login",
            json={"email": self.state.email, "password": self.state.password},
            catch_response=True,
            name="POST /auth/login",
        ) as resp:
            if resp.status_code == 200:
                self.state.access_token = resp.json()["access_token"]
            else:
                resp.failure(f"Login failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def me(self):
        with self.client.get("/auth/me", headers=self.state.headers, catch_response=True, name="GET /auth/me") as resp:
            if resp.status_code == 200 and resp.json()["id"] != self.state.user_id:
                resp.failure("Token resolved to a different account")

    @task
    def update_profile(self):
        with self.client.put(
            "/auth/profile",
            json={"name": fake.name()[:150], "phone": valid_phone()},
            headers=self.state.headers,
            catch_response=True,
            name="PUT /auth/profile",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Profile update failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def change_password(self):
        new_password = f"matkhau-{short_id()}"
        with self.client.put(
            "/auth/password",
            json={"current_password": self.state.password, "new_password": new_password},
            headers=self.state.headers,
            catch_response=True,
            name="PUT /auth/password",
        ) as resp:
            if resp.status_code == 200:
                self.state.password = new_password
            else:
                resp.failure(f"Password change failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def login_again(self):
        self.client.post(
            "/auth/login",
            json={"email": self.state.email, "password": self.state.password},
            name="POST /auth/login",
        )

    @task
    def done(self):
        self.interrupt()


class IdentityUser(HttpUser):
    """Locust user simulating account sign-ups."""

    wait_time = between(0.5, 2.0)
    tasks = [NewAccountJourney]
