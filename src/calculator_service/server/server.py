"""HTTP server hosting the calculator application."""
from pydantic import BaseModel, ConfigDict, Field
import uvicorn

from calculator_service.common.config import ServiceConfig
from calculator_service.common.logger import logger
from calculator_service.server.app import create_app


class CalculatorServer(BaseModel):
    """
    HTTP server handling calculate requests from clients.

    Features:
        - Serves the FastAPI application built by ``create_app``.
        - Evaluates each request independently; uvicorn provides the concurrency.
        - Blocks until the process is interrupted or terminated.
    """

    model_config = ConfigDict(frozen=True)

    config: ServiceConfig = Field(default_factory=ServiceConfig, description="Service settings")

    def start(self) -> None:
        """
        Start serving on the configured host and port.

        :return: None
        """
        logger.info(f"🖥️ Starting server on {self.config.host}:{self.config.port}{self.config.api_path}")
        uvicorn.run(
            create_app(self.config),
            host=str(self.config.host),
            port=self.config.port,
            log_level=self.config.log_level.lower(),
        )
        logger.info("🖥️ Server stopped")
