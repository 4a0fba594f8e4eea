from __future__ import annotations

import logging
from typing import Any

from litestar import MediaType, Request, Response
from litestar.status_codes import HTTP_400_BAD_REQUEST, HTTP_409_CONFLICT
from sqlalchemy.exc import IntegrityError

from testboard.exceptions import ResultsParseError

logger = logging.getLogger(__name__)


def results_parse_error_handler(_: Request[Any, Any, Any], exc: ResultsParseError) -> Response[dict[str, str]]:
    logger.warning('Rejected results (%s): %s', exc.source, exc)
    return Response(
        content={'error_message': str(exc)},
        status_code=HTTP_400_BAD_REQUEST,
        media_type=MediaType.JSON,
    )


def integrity_error_handler(_: Request[Any, Any, Any], exc: IntegrityError) -> Response[dict[str, str]]:
    logger.warning('Constraint violation while saving results: %s', exc.orig)
    return Response(
        content={'error_message': 'Conflicting test run data'},
        status_code=HTTP_409_CONFLICT,
        media_type=MediaType.JSON,
    )
