import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from platformctl.api.main import app
from platformctl.api.middleware import AuthMiddleware

# PLATFORMCTL_ variables are cleared per test, so the middleware falls back to its default key
API_KEY = "platformctl-secret"


@pytest.fixture(scope="module")
def client():
    return TestClient(app)


@pytest.fixture
def headers():
    return {"X-API-Key": API_KEY}


def test_requires_api_key(client):
    response = client.get("/max-pods/c5.large")
    assert response.status_code == 403


def test_max_pods(client, headers):
    response = client.get("/max-pods/c5.large", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"instanceType": "c5.large", "maxPods": 29, "known": True}


def test_max_pods_unknown(client, headers):
    response = client.get("/max-pods/p5.48xlarge", params={"default": 64}, headers=headers)
    assert response.json()["maxPods"] == 64
    assert response.json()["known"] is False


def test_shim(client, headers):
    assert client.get("/shim/1.33", headers=headers).json()["shim"] == "kubectl-v33"
    assert client.get("/shim/1.32", headers=headers).status_code == 404


def test_compose(client, headers, platform_data):
    payload = {
        "platform": platform_data,
        "connection": {"api_server_endpoint": "https://api.example", "certificate_authority": "Q0E="},
    }
    response = client.post("/compose", json=payload, headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert body["warnings"] == []
    node_groups = body["descriptor"]["nodeGroups"]
    assert node_groups[0]["maxPods"] == 29
    assert "apiServerEndpoint: https://api.example" in node_groups[0]["userData"]


def test_compose_unsupported_version_warns(client, headers):
    platform = {"name": "demo", "version": "1.32", "network": {"vpcId": "vpc-1"}}
    body = client.post("/compose", json={"platform": platform}, headers=headers).json()
    assert body["descriptor"]["cluster"]["kubectlShim"] is None
    assert "1.32" in body["warnings"][0]


def test_compose_invalid_platform(client, headers):
    response = client.post("/compose", json={"platform": {"name": "demo"}}, headers=headers)
    assert response.status_code == 422


def test_explicit_token_overrides_default():
    guarded = FastAPI()
    guarded.add_middleware(AuthMiddleware, token="s3cret")

    @guarded.get("/ping")
    def ping():
        return {"ok": True}

    client = TestClient(guarded)
    assert client.get("/ping", headers={"X-API-Key": API_KEY}).status_code == 403
    assert client.get("/ping", headers={"X-API-Key": "s3cret"}).json() == {"ok": True}
