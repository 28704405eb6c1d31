#  This file is part of QuestionPy. (https://questionpy.org)
#  QuestionPy is free software released under terms of the MIT license. See LICENSE.md.
#  (c) Technische Universität Berlin, innoCampus <info@isis.tu-berlin.de>
from questionpy_converter.error import QPyBaseError
from questionpy_moodle.api.models import RequestErrorBody


class QPyConnectionError(QPyBaseError):
    """The server could not be reached."""

    def __init__(self, url: str, cause: Exception):
        super().__init__(f"Request to QPy server at '{url}' failed: {cause}", reason=str(cause), temporary=True)
        self.url = url


class QPyRequestError(QPyBaseError):
    """The server answered with an unexpected status code."""

    def __init__(self, method: str, url: str, status: int, body: RequestErrorBody | None = None):
        msg = f"Request '{method} {url}' unexpectedly returned status code '{status}'"
        if body is not None:
            msg += f" ({body.error_code})"
            if body.reason:
                msg += f": {body.reason}"

        super().__init__(
            msg,
            reason=body.reason if body else None,
            temporary=body.temporary if body else False,
        )
        self.method = method
        self.url = url
        self.status = status
        self.body = body
