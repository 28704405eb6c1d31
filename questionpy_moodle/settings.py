#  This file is part of QuestionPy. (https://questionpy.org)
#  QuestionPy is free software released under terms of the MIT license. See LICENSE.md.
#  (c) Technische Universität Berlin, innoCampus <info@isis.tu-berlin.de>
from pydantic import HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseSettings):
    """Connection to the QuestionPy application server."""

    model_config = SettingsConfigDict(env_prefix="qpy_server_")

    url: HttpUrl = HttpUrl("http://127.0.0.1:9020/")
    timeout: float = 5
    """Total timeout of a single request, in seconds."""

    @field_validator("timeout")
    @classmethod
    def timeout_is_positive(cls, value: float) -> float:
        if value <= 0:
            msg = "must be positive"
            raise ValueError(msg)
        return value

    @property
    def base_url(self) -> str:
        """The server URL, always ending in a slash."""
        url = str(self.url)
        return url if url.endswith("/") else url + "/"
