#  This file is part of QuestionPy. (https://questionpy.org)
#  QuestionPy is free software released under terms of the MIT license. See LICENSE.md.
#  (c) Technische Universität Berlin, innoCampus <info@isis.tu-berlin.de>

from .client import PackageApi, QPyServerClient
from .errors import QPyConnectionError, QPyRequestError
from .models import (
    Attempt,
    AttemptFile,
    AttemptScored,
    AttemptStarted,
    AttemptUi,
    CacheControl,
    ClassifiedResponse,
    NotFoundStatus,
    QuestionEditFormResponse,
    QuestionResponse,
    RequestErrorBody,
    ScoringCode,
    Status,
    Usage,
)

__all__ = [
    "Attempt",
    "AttemptFile",
    "AttemptScored",
    "AttemptStarted",
    "AttemptUi",
    "CacheControl",
    "ClassifiedResponse",
    "NotFoundStatus",
    "PackageApi",
    "QPyConnectionError",
    "QPyRequestError",
    "QPyServerClient",
    "QuestionEditFormResponse",
    "QuestionResponse",
    "RequestErrorBody",
    "ScoringCode",
    "Status",
    "Usage",
]
