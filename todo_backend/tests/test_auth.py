import base64

from fastapi.testclient import TestClient

from todo_api.main import create_app
from todo_api.repositories import InMemoryRepository, InMemorySecretRepository, Stores
from todo_api.settings import Settings


def make_app(username="admin", password="s3cret"):
    stores = Stores(todos=InMemoryRepository(), secrets=InMemorySecretRepository())
    settings = Settings(
        persistence_backend="memory",
        enable_basic_auth=True,
        basic_auth_username=username,
        basic_auth_password=password,
    )
    return create_app(settings, stores=stores), stores


def basic_auth_header(username, password):
    token = base64.b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


def assert_unauthorized(res):
    assert res.status_code == 401
    assert res.headers["WWW-Authenticate"] == "Basic"
    body = res.json()
    assert body["object"] == "error"
    assert body["error"] == "Unauthorized"


class TestGlobalBasicAuth:
    def test_missing_credentials_rejected_without_side_effect(self):
        app, stores = make_app()
        client = TestClient(app)
        assert_unauthorized(client.post("/todos", json={"todo": "sneaky"}))
        assert_unauthorized(client.post("/admin/secrets", json={"key": "k"}))
        assert stores.todos.list_all() == []

    def test_wrong_password_rejected(self):
        app, stores = make_app()
        client = TestClient(app)
        assert_unauthorized(client.post("/todos", json={"todo": "x"}, headers=basic_auth_header("admin", "nope")))
        assert_unauthorized(client.delete("/todos/1", headers=basic_auth_header("root", "s3cret")))
        assert stores.todos.list_all() == []

    def test_every_route_is_gated(self):
        app, _ = make_app()
        client = TestClient(app)
        assert_unauthorized(client.get("/"))
        assert_unauthorized(client.get("/todos"))
        assert_unauthorized(client.get("/todos/1"))
        assert_unauthorized(client.put("/todos/1", json={"todo": "x"}))

    def test_valid_credentials_pass(self):
        app, stores = make_app()
        client = TestClient(app, headers=basic_auth_header("admin", "s3cret"))
        res = client.post("/todos", json={"todo": "allowed"})
        assert res.status_code == 201
        assert client.get("/todos").json()[0]["todo"] == "allowed"
        assert len(stores.todos.list_all()) == 1

    def test_unconfigured_credentials_reject_everything(self):
        app, _ = make_app(username=None, password=None)
        client = TestClient(app, headers=basic_auth_header("admin", "s3cret"))
        res = client.get("/todos")
        assert_unauthorized(res)
        assert res.json()["message"] == "Server authentication not configured"


class TestAuthDisabled:
    def test_no_credentials_needed(self):
        stores = Stores(todos=InMemoryRepository(), secrets=InMemorySecretRepository())
        client = TestClient(create_app(Settings(persistence_backend="memory"), stores=stores))
        assert client.get("/todos").status_code == 200
