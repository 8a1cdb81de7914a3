"""Test class CalculatorServer."""
import uvicorn

from calculator_service.common.config import ServiceConfig
from calculator_service.server.server import CalculatorServer


def test_server_default_config() -> None:
    """A server built without arguments uses the default settings."""
    server = CalculatorServer()
    assert server.config == ServiceConfig()


def test_server_start_runs_uvicorn(monkeypatch) -> None:
    """start hands the application and the configured address to uvicorn."""
    calls = []

    def fake_run(app, **kwargs):
        calls.append((app, kwargs))

    monkeypatch.setattr(uvicorn, "run", fake_run)

    config = ServiceConfig(host="0.0.0.0", port=9100, log_level="warning")
    CalculatorServer(config=config).start()

    assert len(calls) == 1
    app, kwargs = calls[0]
    assert app.state.config is config
    assert kwargs == {"host": "0.0.0.0", "port": 9100, "log_level": "warning"}
