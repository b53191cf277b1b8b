from datetime import datetime

import pytest

from user_service.api.v1.users import MAX_USER_ID
from user_service.core.dependencies import get_user_service

ANA = {"firstName": "Ana", "lastName": "Silva", "email": "ana@x.com"}

# non-positive, non-numeric, or past the 64-bit primary key range
BAD_IDS = ["0", "-1", "abc", "1.5", "9223372036854775808", "99999999999999999999"]


class StubService:
    """Stands in for UserService; records calls and can be told to fail."""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls: list[str] = []

    async def _maybe_fail(self, name):
        self.calls.append(name)
        if self.error is not None:
            raise self.error

    async def list_users(self):
        await self._maybe_fail("list_users")
        return []

    async def get_user(self, user_id):
        await self._maybe_fail("get_user")

    async def create_user(self, payload):
        await self._maybe_fail("create_user")

    async def replace_user(self, user_id, payload):
        await self._maybe_fail("replace_user")

    async def delete_user(self, user_id):
        await self._maybe_fail("delete_user")


@pytest.fixture
def stub_service(app):
    """Install a StubService for the duration of a test; returns a setter."""
    def _install(error: Exception | None = None) -> StubService:
        stub = StubService(error)
        app.dependency_overrides[get_user_service] = lambda: stub
        return stub

    yield _install
    app.dependency_overrides.clear()


def assert_error_body(body: dict, message: str, details: str):
    assert set(body) == {"timestamp", "message", "details"}
    assert body["message"] == message
    assert body["details"] == details
    datetime.fromisoformat(body["timestamp"].replace("Z", "+00:00"))


# ================================================================================================
# GET /all
# ================================================================================================

async def test_list_empty(client):
    resp = await client.get("/api/users/all")

    assert resp.status_code == 200
    assert resp.json() == []


async def test_list_returns_users_in_id_order(client, post_user):
    first = await post_user()
    second = await post_user(firstName="Bea", lastName="Costa", email=None)

    resp = await client.get("/api/users/all")

    assert resp.status_code == 200
    assert resp.json() == [first, second]


# ================================================================================================
# GET /search/{id}
# ================================================================================================

async def test_search_returns_user(client, post_user):
    created = await post_user()

    resp = await client.get(f"/api/users/search/{created['id']}")

    assert resp.status_code == 200
    assert resp.json() == {"id": created["id"], **ANA}


async def test_search_absent_is_404(client):
    resp = await client.get("/api/users/search/42")

    assert resp.status_code == 404
    assert_error_body(resp.json(), "User not found with id :: 42", "uri=/api/users/search/42")


async def test_search_largest_id_reaches_storage(client):
    resp = await client.get(f"/api/users/search/{MAX_USER_ID}")

    assert resp.status_code == 404
    assert resp.json()["message"] == f"User not found with id :: {MAX_USER_ID}"


@pytest.mark.parametrize("bad_id", BAD_IDS)
async def test_search_bad_id_is_400_without_touching_service(client, stub_service, bad_id):
    stub = stub_service()

    resp = await client.get(f"/api/users/search/{bad_id}")

    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation Error"
    assert stub.calls == []


# ================================================================================================
# POST /create
# ================================================================================================

async def test_create_returns_201_with_generated_id(client):
    resp = await client.post("/api/users/create", json={"id": 999, **ANA})

    assert resp.status_code == 201
    body = resp.json()
    assert body["id"] != 999
    assert body == {"id": body["id"], **ANA}

    fetched = await client.get(f"/api/users/search/{body['id']}")
    assert fetched.json() == body


async def test_create_without_email(client):
    resp = await client.post("/api/users/create", json={"firstName": "Ana", "lastName": "Silva"})

    assert resp.status_code == 201
    assert resp.json()["email"] is None


async def test_create_invalid_collects_every_message(client):
    resp = await client.post("/api/users/create", json={"lastName": " ", "email": "not-an-email"})

    assert resp.status_code == 400
    assert_error_body(
        resp.json(),
        "Validation Error",
        "[first name shouldn't be null, the first name cannot be blank, "
        "the last name cannot be blank, invalid email address]",
    )

    listed = await client.get("/api/users/all")
    assert listed.json() == []


async def test_create_only_bad_email(client):
    resp = await client.post("/api/users/create", json={**ANA, "email": "ana@localhost"})

    assert resp.status_code == 400
    assert resp.json()["details"] == "[invalid email address]"


@pytest.mark.parametrize(
    "body",
    [
        {"firstName": 123, "lastName": "Silva"},
        {"firstName": ["Ana"], "lastName": "Silva"},
        ["not", "an", "object"],
    ],
)
async def test_create_wrong_json_types_is_400(client, body):
    resp = await client.post("/api/users/create", json=body)

    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation Error"


async def test_create_missing_body_is_400(client):
    resp = await client.post("/api/users/create")

    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation Error"


# ================================================================================================
# POST /createUser
# ================================================================================================

async def test_create_user_endpoint_creates(client):
    resp = await client.post("/api/users/createUser", json=ANA)

    assert resp.status_code == 201
    assert resp.json()["firstName"] == "Ana"


async def test_create_user_endpoint_validates_like_create(client):
    body = {"firstName": "", "lastName": None, "email": "nope"}

    automatic = await client.post("/api/users/create", json=body)
    manual = await client.post("/api/users/createUser", json=body)

    assert automatic.status_code == manual.status_code == 400
    assert automatic.json()["details"] == manual.json()["details"]


async def test_create_user_endpoint_persistence_failure_is_500(client, stub_service):
    stub_service(RuntimeError("database is gone"))

    resp = await client.post("/api/users/createUser", json=ANA)

    assert resp.status_code == 500
    assert_error_body(resp.json(), "Error during user creation", "database is gone")


# ================================================================================================
# PUT /replace/{id}
# ================================================================================================

async def test_replace_keeps_id(client, post_user):
    created = await post_user()
    new_body = {"id": 555, "firstName": "Bea", "lastName": "Costa", "email": None}

    resp = await client.put(f"/api/users/replace/{created['id']}", json=new_body)

    assert resp.status_code == 200
    assert resp.json() == {"id": created["id"], "firstName": "Bea", "lastName": "Costa", "email": None}

    fetched = await client.get(f"/api/users/search/{created['id']}")
    assert fetched.json()["lastName"] == "Costa"


@pytest.mark.parametrize("bad_id", BAD_IDS)
async def test_replace_bad_id_is_400_without_touching_service(client, stub_service, bad_id):
    stub = stub_service()

    resp = await client.put(f"/api/users/replace/{bad_id}", json=ANA)

    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation Error"
    assert stub.calls == []


async def test_replace_absent_is_404(client):
    resp = await client.put("/api/users/replace/42", json=ANA)

    assert resp.status_code == 404
    assert_error_body(resp.json(), "User not found with id :: 42", "uri=/api/users/replace/42")


async def test_replace_invalid_body_wins_over_absent_id(client):
    resp = await client.put("/api/users/replace/42", json={"firstName": "Ana"})

    assert resp.status_code == 400
    assert resp.json()["details"] == "[last name shouldn't be null, the last name cannot be blank]"


async def test_replace_invalid_body_leaves_row_untouched(client, post_user):
    created = await post_user()

    resp = await client.put(f"/api/users/replace/{created['id']}", json={**ANA, "email": "bad"})

    assert resp.status_code == 400
    fetched = await client.get(f"/api/users/search/{created['id']}")
    assert fetched.json() == created


# ================================================================================================
# DELETE /delete/{id}
# ================================================================================================

async def test_delete_then_search_is_404(client, post_user):
    created = await post_user()

    resp = await client.delete(f"/api/users/delete/{created['id']}")

    assert resp.status_code == 200
    assert resp.content == b""

    again = await client.get(f"/api/users/search/{created['id']}")
    assert again.status_code == 404


async def test_delete_absent_is_404(client):
    resp = await client.delete("/api/users/delete/42")

    assert resp.status_code == 404
    assert resp.json()["message"] == "User not found with id :: 42"


@pytest.mark.parametrize("bad_id", BAD_IDS)
async def test_delete_bad_id_is_400_without_touching_service(client, stub_service, bad_id):
    stub = stub_service()

    resp = await client.delete(f"/api/users/delete/{bad_id}")

    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation Error"
    assert stub.calls == []


# ================================================================================================
# Global handlers
# ================================================================================================

async def test_unexpected_error_is_500_with_exception_message(client, stub_service):
    stub_service(RuntimeError("boom"))

    resp = await client.get("/api/users/all")

    assert resp.status_code == 500
    assert_error_body(resp.json(), "boom", "uri=/api/users/all")


async def test_unexpected_error_without_text_uses_class_name(client, stub_service):
    stub_service(KeyError())

    resp = await client.get("/api/users/all")

    assert resp.status_code == 500
    assert resp.json()["message"] == "KeyError"


async def test_unexpected_error_message_is_str_of_exception(client, stub_service):
    stub_service(KeyError("x"))

    resp = await client.get("/api/users/all")

    assert resp.status_code == 500
    assert resp.json()["message"] == "'x'"


async def test_unknown_route_uses_error_shape(client):
    resp = await client.get("/api/users/nope")

    assert resp.status_code == 404
    assert_error_body(resp.json(), "Not Found", "uri=/api/users/nope")


async def test_wrong_method_is_405(client):
    resp = await client.get("/api/users/create")

    assert resp.status_code == 405
    assert resp.json()["message"] == "Method Not Allowed"


async def test_health(client):
    resp = await client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
