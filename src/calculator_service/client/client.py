"""HTTP batch client."""
from pathlib import Path
import tarfile
import tempfile
from typing import List, Optional, Union
import zipfile

import httpx
import py7zr
from pydantic import BaseModel, ConfigDict, Field, FilePath, IPvAnyAddress

from calculator_service.common.config import build_url
from calculator_service.common.logger import logger
from calculator_service.common.operations import CalculateRequest, CalculateResponse

# Archive handles supported by _extract_archive
Archive = Union[zipfile.ZipFile, tarfile.TarFile, py7zr.SevenZipFile]


class CalculatorClient(BaseModel):
    """
    HTTP client responsible for sending arithmetic expressions to the calculator service.

    The client:
    - reads arithmetic expressions from a plain text file or an archive
    - posts each expression to the calculate endpoint
    - writes one result or error line per expression into an output file
    """

    # Make the Pydantic instance immutable (read-only), to prevent errors
    # that could be caused by changes to the network configuration during execution.
    model_config = ConfigDict(frozen=True)

    host: IPvAnyAddress = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=8080, ge=1, le=65535, description="Server TCP port")
    api_path: str = Field(default="/api/v1/calculate", description="Path of the calculate endpoint")
    timeout: float = Field(default=10.0, gt=0, description="Per-request timeout in seconds")

    @property
    def url(self) -> str:
        return build_url(self.host, self.port, self.api_path)

    def evaluate(self, expression: str, http: Optional[httpx.Client] = None) -> CalculateResponse:
        """
        Submit a single expression and return the service's answer.

        :param str expression: Arithmetic expression
        :param httpx.Client http: Open client to reuse, a short-lived one is created otherwise

        :return: Parsed response with either a result or an error
        :rtype: CalculateResponse
        :raises httpx.HTTPError: On transport failures
        """
        if http is None:
            with httpx.Client(timeout=self.timeout) as owned:
                return self.evaluate(expression, owned)

        request = CalculateRequest(expression=expression)
        response = http.post(self.url, json=request.model_dump())

        if response.status_code == 400:
            return CalculateResponse(error="Bad request")
        try:
            return CalculateResponse.model_validate(response.json())
        except ValueError:
            # Non-JSON body or neither field set
            return CalculateResponse(error=f"Unexpected response (HTTP {response.status_code})")

    def send_file(self,
        input_file: FilePath,
        output_file: Path,
    ) -> None:
        """
        Send every expression of an input file to the server and write the results to an output file.

        :param FilePath input_file: Path to the input file or archive
        :param Path output_file: Path where results will be written

        :return: None
        :raises ValueError: If the archive format is unsupported or contains no .txt file
        """
        # Load expressions from file or archive
        if input_file.suffix == ".txt":
            content = input_file.read_text()
        else:
            content = self._extract_archive(input_file)

        expressions: List[str] = [line.strip() for line in content.splitlines() if line.strip()]
        logger.info(f"📤 Sending {len(expressions)} expressions to {self.url}")

        with httpx.Client(timeout=self.timeout) as http, output_file.open("w", encoding="utf-8") as f_out:
            for expr in expressions:
                outcome = self.evaluate(expr, http)
                if outcome.succeeded:
                    f_out.write(f"{expr} = {outcome.result}\n")
                else:
                    f_out.write(f"{expr} -> ERROR: {outcome.error}\n")
                # Flushing keeps finished lines on disk if the run is interrupted
                f_out.flush()

        logger.info(f"📥 Results written to {output_file}")

    def _extract_archive(self, archive_path: FilePath) -> str:
        """
        Extract the first .txt file found in a supported archive and return its content as a string.

        Supported formats:
        - .zip
        - .tar.xz
        - .7z

        :param FilePath archive_path: Path to the archive file

        :return: Content of the extracted .txt file
        :rtype: str
        :raises ValueError: If no .txt file is found or format is unsupported
        """
        archive_format = _archive_format(archive_path)

        # Extract into a temporary directory so nothing leaks next to the input
        with tempfile.TemporaryDirectory() as tmpdir:
            tmpdir_path = Path(tmpdir)
            with _open_archive(archive_path, archive_format) as archive:
                member = next((name for name in _member_names(archive) if name.endswith(".txt")), None)
                if member is None:
                    raise ValueError(f"📄❌ No .txt file found in {archive_format} archive")
                _extract_member(archive, member, tmpdir_path)
            return (tmpdir_path / member).read_text()


def _archive_format(archive_path: Path) -> str:
    """Name the archive format from the file suffixes."""
    if archive_path.suffix == ".zip":
        return "zip"
    if archive_path.suffixes[-2:] == [".tar", ".xz"]:
        return "tar.xz"
    if archive_path.suffix == ".7z":
        return "7z"
    raise ValueError(f"📄❌ Unsupported archive format: {archive_path.suffix}")


def _open_archive(archive_path: Path, archive_format: str) -> Archive:
    if archive_format == "zip":
        return zipfile.ZipFile(archive_path, "r")
    if archive_format == "tar.xz":
        return tarfile.open(archive_path, "r:xz")
    return py7zr.SevenZipFile(archive_path, mode="r")


def _member_names(archive: Archive) -> List[str]:
    """List member names in archive order."""
    if isinstance(archive, tarfile.TarFile):
        # Directories may carry a .txt name too
        return [m.name for m in archive.getmembers() if m.isfile()]
    if isinstance(archive, zipfile.ZipFile):
        return archive.namelist()
    return archive.getnames()


def _extract_member(archive: Archive, member: str, destination: Path) -> None:
    if isinstance(archive, tarfile.TarFile):
        archive.extract(member, path=destination, filter="data")
    elif isinstance(archive, zipfile.ZipFile):
        archive.extract(member, path=destination)
    else:
        archive.extract(path=destination, targets=[member])
