"""
Command line entrypoint.

Commands:
- serve:  run the HTTP server in the foreground
- submit: send an operations file to a running server
- run:    start a server process, submit an operations file against it, stop the server

The ``run`` command validates end to end:
- HTTP communication
- Multiprocessing lifecycle
- Correctness of the results file
"""

import argparse
from multiprocessing import Process
from pathlib import Path
import time
from typing import List, Optional

import httpx
from pydantic import BaseModel, FilePath, ValidationError

from calculator_service.client.client import CalculatorClient
from calculator_service.common.config import ServiceConfig
from calculator_service.common.logger import logger
from calculator_service.server.server import CalculatorServer


class CliArgs(BaseModel):
    """
    Pydantic model used to validate CLI arguments.

    Attributes
    ----------
    command : str
        One of "serve", "submit" or "run".
    file_path : FilePath, optional
        Path to the file containing arithmetic operations.
    output_path : Path, optional
        Where to write results, derived from ``file_path`` when omitted.
    config : ServiceConfig
        Network and evaluation settings.
    """

    command: str
    file_path: Optional[FilePath] = None
    output_path: Optional[Path] = None
    config: ServiceConfig


def run_server(config: ServiceConfig) -> None:
    """
    Start the calculator server.

    The server runs in its own process when launched by ``run``.
    """
    CalculatorServer(config=config).start()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="calculator-service",
        description="Arithmetic expression calculator service",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP server")
    submit = subparsers.add_parser("submit", help="Send an operations file to a running server")
    run = subparsers.add_parser("run", help="Start a server, submit an operations file and stop")

    for sub in (serve, submit, run):
        sub.add_argument("--host", default=None, help="Server host address")
        sub.add_argument("--port", type=int, default=None, help="Server TCP port")

    for sub in (submit, run):
        sub.add_argument("file_path", help="Path to the file containing arithmetic operations")
        sub.add_argument("--output", dest="output_path", default=None, help="Path of the results file")

    return parser


def parse_args(argv: Optional[List[str]] = None) -> CliArgs:
    """
    Parse and validate command-line arguments.

    :return: Validated CLI arguments
    :rtype: CliArgs
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = ServiceConfig.from_env(host=args.host, port=args.port)
        return CliArgs(
            command=args.command,
            file_path=getattr(args, "file_path", None),
            output_path=getattr(args, "output_path", None),
            config=config,
        )
    except ValidationError as exc:
        parser.error(str(exc))


def build_output_path(input_path: Path) -> Path:
    """
    Construct a safe output file path based on the input file.

    - Preserves the original folder
    - Replaces dots in extensions with underscores
    - Appends '_results.txt' at the end

    Examples
    --------
    input: resources/operations_short.7z
    output: resources/operations_short_7z_results.txt

    :param input_path: Path to the input file
    :return: Path to the output file
    """
    # Strip every suffix from the name so "ops.tar.xz" yields "ops_tar_xz"
    stem = input_path.name[: len(input_path.name) - len("".join(input_path.suffixes))]
    suffix_safe = "".join(input_path.suffixes).replace(".", "_")
    return input_path.with_name(f"{stem}{suffix_safe}_results.txt")


def wait_for_server(config: ServiceConfig, timeout: float = 10.0, interval: float = 0.1) -> None:
    """
    Block until the calculator server answers on its endpoint.

    The endpoint only accepts POST, so a GET answered with 405 identifies it.
    Any other status means a different process holds the port.

    :raises TimeoutError: If the server does not answer before ``timeout`` seconds
    """
    url = config.url
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            response = httpx.get(url, timeout=interval)
        except httpx.TransportError:
            time.sleep(interval)
            continue
        if response.status_code == 405:
            return
        logger.warning(f"⏳ Unexpected HTTP {response.status_code} from {url}, waiting for the calculator server")
        time.sleep(interval)
    raise TimeoutError(f"Server did not start listening on {url} within {timeout}s")


def make_client(config: ServiceConfig) -> CalculatorClient:
    return CalculatorClient(host=config.host, port=config.port, api_path=config.api_path)


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main function executed by the ``calculator-service`` console script.
    """
    cli_args = parse_args(argv)
    config = cli_args.config

    if cli_args.command == "serve":
        run_server(config)
        return

    input_path: Path = Path(cli_args.file_path)
    output_path: Path = cli_args.output_path or build_output_path(input_path)

    if cli_args.command == "submit":
        make_client(config).send_file(input_path, output_path)
        return

    server_process = Process(target=run_server, args=(config,))
    server_process.start()

    try:
        wait_for_server(config)
        make_client(config).send_file(input_path, output_path)
    finally:
        # Ensure the server is always stopped
        server_process.terminate()
        server_process.join()
        logger.info("🛑 Server process stopped")


if __name__ == "__main__":
    main()
