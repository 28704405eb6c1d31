#  This file is part of QuestionPy. (https://questionpy.org)
#  QuestionPy is free software released under terms of the MIT license. See LICENSE.md.
#  (c) Technische Universität Berlin, innoCampus <info@isis.tu-berlin.de>
import json
import logging
from asyncio import to_thread
from collections.abc import MutableMapping
from pathlib import Path
from types import TracebackType
from typing import Any, NamedTuple, TypeVar
from urllib.parse import urljoin

from aiohttp import ClientError, ClientSession, ClientTimeout, FormData

from questionpy_converter import ArrayConverter, ConversionError
from questionpy_moodle.api.errors import QPyConnectionError, QPyRequestError
from questionpy_moodle.api.models import (
    Attempt,
    AttemptScored,
    AttemptStarted,
    NotFoundStatus,
    QuestionEditFormResponse,
    QuestionResponse,
    RequestErrorBody,
    Status,
)
from questionpy_moodle.package import Package, PackageVersionsInfo
from questionpy_moodle.settings import ServerSettings

__all__ = ["PackageApi", "QPyServerClient"]

_T = TypeVar("_T")


class _ServerLogAdapter(logging.LoggerAdapter):
    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> tuple[str, MutableMapping[str, Any]]:
        return f"[{self.extra['server'] if self.extra else '?'}] {msg}", kwargs


class _Response(NamedTuple):
    status: int
    data: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class QPyServerClient:
    """Talks to a QuestionPy application server, converting its JSON responses into model instances.

    Should be used as an async context manager, which opens and closes the underlying HTTP session::

        async with QPyServerClient(ServerSettings()) as client:
            status = await client.get_status()
    """

    def __init__(
        self,
        settings: ServerSettings,
        converter: ArrayConverter | None = None,
        session: ClientSession | None = None,
    ):
        self._settings = settings
        self._base_url = settings.base_url
        self._converter = converter or ArrayConverter()
        self._session = session
        self._owns_session = session is None

        self._log = _ServerLogAdapter(logging.getLogger("questionpy-moodle:client"), {"server": self._base_url})

    async def __aenter__(self) -> "QPyServerClient":
        if self._session is None:
            self._session = ClientSession(timeout=ClientTimeout(total=self._settings.timeout))
        return self

    async def __aexit__(
        self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: TracebackType | None
    ) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    @property
    def converter(self) -> ArrayConverter:
        return self._converter

    @property
    def log(self) -> logging.LoggerAdapter:
        return self._log

    def url(self, path: str) -> str:
        return urljoin(self._base_url, path.lstrip("/"))

    async def request(self, method: str, path: str, parts: dict[str, str | bytes] | None = None) -> _Response:
        """Sends a request and parses the JSON body of the response, if any.

        Args:
            method: HTTP method.
            path: Path relative to the server URL.
            parts: Multipart form fields. Bytes are sent as files.

        Raises:
            QPyConnectionError: If no response was received.
        """
        if self._session is None:
            msg = "The client must be entered as an async context manager before sending requests."
            raise RuntimeError(msg)

        url = self.url(path)
        data = None
        if parts is not None:
            data = FormData()
            for name, value in parts.items():
                if isinstance(value, bytes):
                    data.add_field(name, value, filename=name, content_type="application/octet-stream")
                else:
                    data.add_field(name, value)

        try:
            async with self._session.request(method, url, data=data) as response:
                body = await response.read()
                status = response.status
        except (ClientError, TimeoutError) as e:
            self._log.warning("%s %s failed: %s", method, path, e)
            raise QPyConnectionError(url, e) from e

        parsed = None
        if body:
            try:
                parsed = json.loads(body)
            except ValueError:
                parsed = body.decode(errors="replace")

        return _Response(status, parsed)

    def convert(self, cls: type[_T], data: Any) -> _T:
        return self._converter.from_array(cls, data)

    def raise_for_status(self, method: str, path: str, response: _Response) -> None:
        if response.ok:
            return

        body = None
        if isinstance(response.data, dict):
            try:
                body = self.convert(RequestErrorBody, response.data)
            except ConversionError:
                body = None

        self._log.warning("%s %s returned status code %s.", method, path, response.status)
        raise QPyRequestError(method, self.url(path), response.status, body)

    async def get_status(self) -> Status:
        response = await self.request("GET", "/status")
        self.raise_for_status("GET", "/status", response)
        return self.convert(Status, response.data)

    async def get_packages(self) -> list[PackageVersionsInfo]:
        """Lists the packages available on the server. Packages which cannot be converted are skipped."""
        response = await self.request("GET", "/packages")
        self.raise_for_status("GET", "/packages", response)

        if not isinstance(response.data, list):
            self._log.warning("Expected a list of packages, got '%s'.", type(response.data).__name__)
            return []

        packages = []
        for raw in response.data:
            try:
                packages.append(self.convert(PackageVersionsInfo, raw))
            except ConversionError as e:
                self._log.warning("Skipping invalid package: %s", e)

        return packages

    async def get_package(self, package_hash: str) -> Package | None:
        """Gets a specific package version, or `None` if the server doesn't know the hash."""
        path = f"/packages/{package_hash}"
        response = await self.request("GET", path)
        if response.status == 404:
            return None
        self.raise_for_status("GET", path, response)
        return self.convert(Package, response.data)

    def package(self, package_hash: str, package_file: Path | bytes | None = None) -> "PackageApi":
        """Returns an API for calls concerning a specific package.

        Args:
            package_hash: Hash of the package.
            package_file: The package itself, which is uploaded if the server doesn't have it yet.
        """
        return PackageApi(self, package_hash, package_file)


class PackageApi:
    """Package-specific calls: question creation and attempts."""

    def __init__(self, client: QPyServerClient, package_hash: str, package_file: Path | bytes | None = None):
        self._client = client
        self._hash = package_hash
        self._file = package_file

    async def get_question_edit_form(self, question_state: str | None) -> QuestionEditFormResponse:
        data = await self._post_and_maybe_retry("/options", {}, question_state)
        return self._client.convert(QuestionEditFormResponse, data)

    async def create_question(self, question_state: str | None, form_data: dict[str, Any]) -> QuestionResponse:
        data = await self._post_and_maybe_retry("/question", {"form_data": form_data, "context": 1}, question_state)
        return self._client.convert(QuestionResponse, data)

    async def start_attempt(self, question_state: str, variant: int) -> AttemptStarted:
        data = await self._post_and_maybe_retry("/attempt/start", {"variant": variant}, question_state)
        return self._client.convert(AttemptStarted, data)

    async def view_attempt(
        self,
        question_state: str,
        attempt_state: str,
        scoring_state: str | None = None,
        response: dict[str, Any] | None = None,
    ) -> Attempt:
        main: dict[str, Any] = {"attempt_state": attempt_state}
        if response is not None:
            main["response"] = response
        if scoring_state:
            main["scoring_state"] = scoring_state

        data = await self._post_and_maybe_retry("/attempt/view", main, question_state)
        return self._client.convert(Attempt, data)

    async def score_attempt(
        self, question_state: str, attempt_state: str, scoring_state: str | None, response: dict[str, Any]
    ) -> AttemptScored:
        main: dict[str, Any] = {"attempt_state": attempt_state, "response": response, "generate_hint": False}
        if scoring_state:
            main["scoring_state"] = scoring_state

        data = await self._post_and_maybe_retry("/attempt/score", main, question_state)
        return self._client.convert(AttemptScored, data)

    @staticmethod
    def _create_request_parts(main: dict[str, Any], question_state: str | None) -> dict[str, str | bytes]:
        parts: dict[str, str | bytes] = {}
        if question_state is not None:
            parts["question_state"] = question_state
        parts["main"] = json.dumps(main)
        return parts

    def _is_package_missing(self, response: _Response) -> bool:
        if response.status != 404 or not isinstance(response.data, dict):
            return False
        try:
            return self._client.convert(NotFoundStatus, response.data).what == "PACKAGE"
        except ConversionError:
            return False

    async def _read_package(self) -> bytes:
        if isinstance(self._file, Path):
            return await to_thread(self._file.read_bytes)
        assert self._file is not None
        return self._file

    async def _post_and_maybe_retry(self, subpath: str, main: dict[str, Any], question_state: str | None) -> Any:
        path = f"/packages/{self._hash}/{subpath.lstrip('/')}"
        parts = self._create_request_parts(main, question_state)

        response = await self._client.request("POST", path, parts)
        if self._file is not None and self._is_package_missing(response):
            # The server doesn't have the package (anymore), so we send it along.
            self._client.log.info("Server is missing package '%s', retrying with the package attached.", self._hash)
            parts["package"] = await self._read_package()
            response = await self._client.request("POST", path, parts)

        self._client.raise_for_status("POST", path, response)
        return response.data
