"""Test the HTTP adapter."""
from fastapi.testclient import TestClient
import pytest

from calculator_service.common.config import ServiceConfig
from calculator_service.server.app import create_app

API_PATH = "/api/v1/calculate"


@pytest.fixture
def client() -> TestClient:
    """Test client bound to an application with default settings."""
    return TestClient(create_app())


@pytest.mark.parametrize("method,body,status_code,expected", [
    ("POST", {"expression": "2 + 3 * 4"}, 200, {"result": "14.000000"}),
    ("POST", {"expression": "(2+3)*(4-1)"}, 200, {"result": "15.000000"}),
    ("POST", {"expression": "1 / 3"}, 200, {"result": "0.333333"}),
    ("POST", {"expression": "2 + 3 * 4 "}, 422, {"error": "Expression is not valid"}),
    ("POST", {"expression": "(2 + 3 * 4"}, 422, {"error": "Expression is not valid"}),
    ("POST", {"expression": "1.2.3 + 1"}, 422, {"error": "Expression is not valid"}),
    ("POST", {"expression": "10 / 0"}, 422, {"error": "Division by zero"}),
    ("GET", {"expression": "2 + 3 * 4"}, 405, {}),
    ("PUT", {"expression": "2 + 3 * 4"}, 405, {}),
    ("POST", {"expression": ""}, 400, {}),
    ("POST", {}, 400, {}),
])
def test_calculate_handler(client, method, body, status_code, expected) -> None:
    """Each request maps to the expected status code and body."""
    response = client.request(method, API_PATH, json=body)
    assert response.status_code == status_code
    assert response.json() == expected


@pytest.mark.parametrize("content", [
    b"not json",
    b'{"expression": 42}',
    b'{"expression": null}',
    b'["2 + 2"]',
])
def test_malformed_body_is_bad_request(client, content) -> None:
    """Bodies that are not an object with a string expression are rejected with 400."""
    response = client.post(API_PATH, content=content, headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert response.json() == {}


def test_missing_body_is_bad_request(client) -> None:
    """A POST without any body is rejected with 400."""
    response = client.post(API_PATH)
    assert response.status_code == 400


def test_method_not_allowed_lists_post(client) -> None:
    """The 405 response advertises the accepted method."""
    response = client.get(API_PATH)
    assert response.status_code == 405
    assert "POST" in response.headers.get("allow", "")


def test_unknown_path(client) -> None:
    """Unknown routes answer 404 with an empty body."""
    response = client.post("/api/v2/calculate", json={"expression": "1 + 1"})
    assert response.status_code == 404
    assert response.json() == {}


def test_division_by_zero_generic_message() -> None:
    """Division by zero can be folded into the generic error message."""
    client = TestClient(create_app(ServiceConfig(report_division_by_zero=False)))
    response = client.post(API_PATH, json={"expression": "10 / 0"})
    assert response.status_code == 422
    assert response.json() == {"error": "Expression is not valid"}


def test_nesting_limit_from_config() -> None:
    """The configured depth limit turns deep nesting into a 422."""
    client = TestClient(create_app(ServiceConfig(max_depth=2)))
    assert client.post(API_PATH, json={"expression": "((1))"}).status_code == 200
    response = client.post(API_PATH, json={"expression": "(((1)))"})
    assert response.status_code == 422
    assert response.json() == {"error": "Expression is not valid"}


def test_custom_api_path() -> None:
    """The endpoint path comes from the configuration."""
    client = TestClient(create_app(ServiceConfig(api_path="/calc")))
    assert client.post("/calc", json={"expression": "2 * 21"}).json() == {"result": "42.000000"}
    assert client.post(API_PATH, json={"expression": "2 * 21"}).status_code == 404


def test_outcome_is_logged(client, caplog) -> None:
    """Successes and rejections are logged."""
    with caplog.at_level("INFO", logger="calculator_service"):
        client.post(API_PATH, json={"expression": "2 + 2"})
        client.post(API_PATH, json={"expression": "2 +"})
    messages = [record.getMessage() for record in caplog.records]
    assert any("'2 + 2' = 4.000000" in m for m in messages)
    assert any("syntax error" in m for m in messages)
