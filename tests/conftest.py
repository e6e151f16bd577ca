# OrderDesk API Test Suite - Shared Configuration and Fixtures
#
# This module provides:
# - Test database provisioning (ephemeral SQLite file per test run)
# - Seeded admin and salesman accounts
# - An httpx client bound to the Flask app over WSGI (no server process)
# - Data factories that go through the public API
# - Failure message formatting

import itertools
import os
import sys
import time
import tempfile
import shutil
from pathlib import Path
from typing import Generator, Optional, Dict, Any
from dataclasses import dataclass

import pytest
import httpx

# Add backend to path for imports
REPO_ROOT = Path(__file__).parent.parent
BACKEND_DIR = REPO_ROOT / "backend"
sys.path.insert(0, str(BACKEND_DIR))

from orderdesk import create_app  # noqa: E402
from orderdesk.config import Config  # noqa: E402
from orderdesk.extensions import db  # noqa: E402
from orderdesk.permissions import Role  # noqa: E402
from orderdesk.services.auth_service import create_user  # noqa: E402


ADMIN_EMAIL = "admin@flow.test"
SALESMAN_EMAIL = "sales@flow.test"
PASSWORD = "TestPass123!"


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class TestConfig:
    """Test configuration with environment variable overrides."""
    # Set TEST_EXTERNAL_SERVER to run against an already running, seeded backend
    backend_base_url: str = os.environ.get("TEST_BACKEND_URL", "http://testserver")
    external_server: bool = bool(os.environ.get("TEST_EXTERNAL_SERVER"))

    request_timeout: float = float(os.environ.get("TEST_REQUEST_TIMEOUT", "30"))

    admin_email: str = os.environ.get("TEST_ADMIN_EMAIL", ADMIN_EMAIL)
    salesman_email: str = os.environ.get("TEST_SALESMAN_EMAIL", SALESMAN_EMAIL)
    password: str = os.environ.get("TEST_PASSWORD", PASSWORD)

    # Random seed for unique test data
    seed: int = int(os.environ.get("TEST_SEED", str(int(time.time()))))


# =============================================================================
# FAILURE MESSAGE HELPER
# =============================================================================

class TestFailure(Exception):
    """
    Custom exception with detailed, human-readable failure messages.

    Structure:
    1. Scenario: What was being tested
    2. Expected: What should have happened
    3. Actual: What actually happened
    4. Likely Cause: Most probable reason for failure
    5. Code Location: Where to look in the codebase
    """

    def __init__(
        self,
        scenario: str,
        expected: str,
        actual: str,
        likely_cause: str,
        code_location: str,
        response: Optional[httpx.Response] = None,
        extra_context: Optional[Dict[str, Any]] = None
    ):
        self.scenario = scenario
        self.expected = expected
        self.actual = actual
        self.likely_cause = likely_cause
        self.code_location = code_location
        self.response = response
        self.extra_context = extra_context or {}

        super().__init__(self._format_message())

    def _format_message(self) -> str:
        lines = [
            "",
            "=" * 80,
            "TEST FAILURE DETAILS",
            "=" * 80,
            f"SCENARIO: {self.scenario}",
            "-" * 80,
            f"EXPECTED: {self.expected}",
            f"ACTUAL: {self.actual}",
            "-" * 80,
            f"LIKELY CAUSE: {self.likely_cause}",
            f"CODE LOCATION: {self.code_location}",
        ]

        if self.response is not None:
            lines.extend([
                "-" * 80,
                f"HTTP STATUS: {self.response.status_code}",
                f"RESPONSE BODY: {self.response.text[:1000]}",
            ])

        if self.extra_context:
            lines.append("-" * 80)
            lines.append("EXTRA CONTEXT:")
            for key, value in self.extra_context.items():
                lines.append(f"  {key}: {value}")

        lines.append("=" * 80)
        return "\n".join(lines)


def assert_response(
    response: httpx.Response,
    expected_status: int,
    scenario: str,
    code_location: str,
    expected_body_contains: Optional[str] = None
):
    """
    Assert HTTP response status and optionally body content.
    Raises TestFailure with detailed message on failure.
    """
    if response.status_code != expected_status:
        raise TestFailure(
            scenario=scenario,
            expected=f"HTTP {expected_status}",
            actual=f"HTTP {response.status_code}",
            likely_cause=_infer_cause(response),
            code_location=code_location,
            response=response
        )

    if expected_body_contains and expected_body_contains not in response.text:
        raise TestFailure(
            scenario=scenario,
            expected=f"Response body contains: {expected_body_contains}",
            actual=f"Response body: {response.text[:500]}",
            likely_cause="Response format changed or wrong endpoint hit",
            code_location=code_location,
            response=response
        )


def _infer_cause(response: httpx.Response) -> str:
    """Infer likely cause from response status/body."""
    if response.status_code == 401:
        return "Authentication failed - bearer token missing or user deleted"
    elif response.status_code == 403:
        return "Forbidden - token invalid/expired, account blocked, or role not allowed"
    elif response.status_code == 404:
        return "Resource not found - wrong ID or already deleted"
    elif response.status_code == 400:
        return "Invalid request - missing field, validation failed, or business rule violated"
    elif response.status_code == 500:
        return "Server error - check backend logs for stack trace"
    else:
        return f"Unexpected status code {response.status_code}"


# =============================================================================
# HTTP CLIENT WITH AUTH HELPERS
# =============================================================================

class APIClient:
    """
    HTTP client wrapper with authentication and convenience methods.

    With an app, requests go straight into the WSGI callable; without one
    they go over the network to base_url.
    """

    def __init__(self, base_url: str, app=None, timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        transport = httpx.WSGITransport(app=app) if app is not None else None
        self.client = httpx.Client(base_url=self.base_url, transport=transport, timeout=timeout)
        self.token: Optional[str] = None
        self.refresh_token: Optional[str] = None

    def _headers(self) -> Dict:
        """Build request headers with optional auth."""
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def get(self, path: str, params: Optional[Dict] = None, **kwargs) -> httpx.Response:
        return self.client.get(path, headers=self._headers(), params=params, **kwargs)

    def post(self, path: str, json: Optional[Dict] = None, **kwargs) -> httpx.Response:
        return self.client.post(path, headers=self._headers(), json=json, **kwargs)

    def put(self, path: str, json: Optional[Dict] = None, **kwargs) -> httpx.Response:
        return self.client.put(path, headers=self._headers(), json=json, **kwargs)

    def patch(self, path: str, json: Optional[Dict] = None, **kwargs) -> httpx.Response:
        return self.client.patch(path, headers=self._headers(), json=json, **kwargs)

    def delete(self, path: str, **kwargs) -> httpx.Response:
        return self.client.delete(path, headers=self._headers(), **kwargs)

    def login(self, email: str, password: str) -> bool:
        """Authenticate and store both tokens."""
        response = self.post("/api/auth/login", json={
            "email": email,
            "password": password
        })
        if response.status_code == 200:
            data = response.json()
            self.token = data.get("accessToken")
            self.refresh_token = data.get("refreshToken")
            return True
        return False

    def logout(self) -> bool:
        """Revoke the refresh token and clear local auth state."""
        if not self.refresh_token:
            self.token = None
            return True
        response = self.post("/api/auth/logout", json={"refreshToken": self.refresh_token})
        if response.status_code in (200, 204):
            self.token = None
            self.refresh_token = None
            return True
        return False

    def close(self):
        """Close the HTTP client."""
        self.client.close()


# =============================================================================
# APP MANAGEMENT
# =============================================================================

class AppManager:
    """
    Builds the Flask app against a throwaway SQLite file and seeds accounts.
    """

    def __init__(self, config: TestConfig):
        self.config = config
        self.app = None
        self.db_dir: Optional[Path] = None

    def start(self):
        self.db_dir = Path(tempfile.mkdtemp(prefix="orderdesk_test_"))
        db_file = self.db_dir / "test_orderdesk.sqlite3"

        class FlowTestingConfig(Config):
            TESTING = True
            SQLALCHEMY_DATABASE_URI = f"sqlite:///{db_file}"
            BCRYPT_ROUNDS = 4
            SMTP_USER = None
            SMTP_PASSWORD = None

        self.app = create_app(FlowTestingConfig)
        with self.app.app_context():
            db.create_all()
            self._seed()
        return self.app

    def _seed(self):
        create_user(
            name="Flow Admin",
            phone="03000000001",
            address="Head Office",
            email=self.config.admin_email,
            password=self.config.password,
            role=Role.ADMIN,
        )
        create_user(
            name="Flow Salesman",
            phone="03000000002",
            address="Route 1",
            email=self.config.salesman_email,
            password=self.config.password,
            role=Role.SALESMAN,
            id_card_number="35202-9999999-9",
        )

    def stop(self):
        if self.app is not None:
            with self.app.app_context():
                db.session.remove()
                db.engine.dispose()
            self.app = None

        if self.db_dir and self.db_dir.exists():
            shutil.rmtree(self.db_dir, ignore_errors=True)


# =============================================================================
# TEST DATA FACTORIES
# =============================================================================

class TestDataFactory:
    """
    Factory for creating test data via API calls (requires an admin client).
    """

    # Shared across factory instances so unique fields never repeat within a run
    _sequence = itertools.count(1)

    def __init__(self, client: APIClient, seed: int = 0):
        self.client = client
        self._base = (seed % 10000) * 1000

    def _next_id(self) -> int:
        return self._base + next(self._sequence)

    def _expect_created(self, response: httpx.Response, key: str, scenario: str, code_location: str) -> Dict:
        if response.status_code == 201:
            return response.json()[key]
        raise TestFailure(
            scenario=scenario,
            expected="HTTP 201",
            actual=f"HTTP {response.status_code}",
            likely_cause=_infer_cause(response),
            code_location=code_location,
            response=response
        )

    def create_shop(self, shop_name: Optional[str] = None, city: str = "Lahore") -> Dict:
        """Create a shop via API."""
        n = self._next_id()
        response = self.client.post("/api/admin/add-shop", json={
            "shopName": shop_name or f"Test Shop {n}",
            "ownerName": f"Owner {n}",
            "cnic": f"CNIC-{n}",
            "phoneNumber": f"0300{n:07d}",
            "address": f"Street {n}",
            "city": city,
        })
        return self._expect_created(
            response, "shop", "Create test shop",
            "backend/orderdesk/routes/shops.py:create_shop_route",
        )

    def create_category(self, name: Optional[str] = None) -> Dict:
        """Create a category via API."""
        n = self._next_id()
        response = self.client.post("/api/admin/category", json={"name": name or f"Category {n}"})
        return self._expect_created(
            response, "category", "Create test category",
            "backend/orderdesk/routes/catalog.py:create_category_route",
        )

    def create_product(
        self,
        category_id: int,
        name: Optional[str] = None,
        price=100,
        quantity: int = 10
    ) -> Dict:
        """Create a product via API."""
        n = self._next_id()
        response = self.client.post("/api/admin/add-product", json={
            "name": name or f"Test Product {n}",
            "categoryType": category_id,
            "price": price,
            "quantity": quantity,
        })
        return self._expect_created(
            response, "product", "Create test product",
            "backend/orderdesk/routes/catalog.py:create_product_route",
        )

    def create_salesman(self, password: str = PASSWORD) -> Dict:
        """Create a salesman via API."""
        n = self._next_id()
        response = self.client.post("/api/admin/create-salesman", json={
            "name": f"Salesman {n}",
            "phone": f"0311{n:07d}",
            "address": f"Route {n}",
            "idCardNumber": f"ID-{n}",
            "email": f"salesman{n}@flow.test",
            "password": password,
        })
        return self._expect_created(
            response, "user", "Create test salesman",
            "backend/orderdesk/routes/admin.py:create_salesman_route",
        )


# =============================================================================
# PYTEST FIXTURES
# =============================================================================

@pytest.fixture(scope="session")
def test_config() -> TestConfig:
    """Provide test configuration."""
    return TestConfig()


@pytest.fixture(scope="session")
def flask_app(test_config: TestConfig):
    """
    Build the app once per test session.
    Yields None when testing an external server.
    """
    if test_config.external_server:
        yield None
        return

    manager = AppManager(test_config)
    app = manager.start()
    yield app
    manager.stop()


def _new_client(test_config: TestConfig, flask_app) -> APIClient:
    return APIClient(test_config.backend_base_url, app=flask_app, timeout=test_config.request_timeout)


@pytest.fixture
def client(test_config: TestConfig, flask_app) -> Generator[APIClient, None, None]:
    """Provide an unauthenticated API client for each test."""
    api_client = _new_client(test_config, flask_app)
    yield api_client
    api_client.close()


@pytest.fixture
def admin_client(test_config: TestConfig, flask_app) -> Generator[APIClient, None, None]:
    """Provide an authenticated admin client."""
    api_client = _new_client(test_config, flask_app)
    if not api_client.login(test_config.admin_email, test_config.password):
        pytest.fail(f"Failed to login as {test_config.admin_email}")
    yield api_client
    api_client.close()


@pytest.fixture
def salesman_client(test_config: TestConfig, flask_app) -> Generator[APIClient, None, None]:
    """Provide an authenticated salesman client."""
    api_client = _new_client(test_config, flask_app)
    if not api_client.login(test_config.salesman_email, test_config.password):
        pytest.fail(f"Failed to login as {test_config.salesman_email}")
    yield api_client
    api_client.close()


@pytest.fixture
def factory(admin_client: APIClient, test_config: TestConfig) -> TestDataFactory:
    """Provide test data factory with admin auth."""
    return TestDataFactory(admin_client, seed=test_config.seed)


# =============================================================================
# TEST MARKERS
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "smoke: Quick smoke tests for critical paths")
    config.addinivalue_line("markers", "full: Full regression tests")
    config.addinivalue_line("markers", "auth: Authentication tests")
    config.addinivalue_line("markers", "rbac: Role-based access control tests")
    config.addinivalue_line("markers", "catalog: Category and product tests")
    config.addinivalue_line("markers", "orders: Order placement and payment tests")
