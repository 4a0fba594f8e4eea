from __future__ import annotations

import logging

from litestar import Litestar
from litestar.di import Provide
from litestar.logging import LoggingConfig
from sqlalchemy.exc import IntegrityError

from testboard.config import Settings
from testboard.db import create_engine, create_schema, create_session_maker
from testboard.exceptions import ResultsParseError
from testboard.testrun import TestRunDatabaseRepository

from .controllers import RepositoryController, ResultsController, TestRunController
from .dependencies import provide_db_session, provide_repo, provide_results_service
from .exception_handlers import integrity_error_handler, results_parse_error_handler

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> Litestar:
    """
    Build the Litestar application.

    The engine is created on startup (inside the serving event loop) and disposed on shutdown.
    """
    settings = settings or Settings.from_env()

    async def connect_db(app: Litestar) -> None:
        engine = create_engine(settings)
        if settings.create_schema:
            await create_schema(engine)
        app.state.engine = engine
        app.state.session_maker = create_session_maker(engine)
        logger.info('Database ready (%s)', engine.dialect.name)

    async def dispose_db(app: Litestar) -> None:
        engine = getattr(app.state, 'engine', None)
        if engine is not None:
            await engine.dispose()

    def provide_settings() -> Settings:
        return settings

    return Litestar(
        route_handlers=[ResultsController, TestRunController, RepositoryController],
        dependencies={
            'settings': Provide(provide_settings, sync_to_thread=False),
            'db_session': Provide(provide_db_session),
            'test_run_repo': Provide(provide_repo(TestRunDatabaseRepository)),
            'results_service': Provide(provide_results_service),
        },
        exception_handlers={
            ResultsParseError: results_parse_error_handler,
            IntegrityError: integrity_error_handler,
        },
        on_startup=[connect_db],
        on_shutdown=[dispose_db],
        logging_config=LoggingConfig(
            root={'level': settings.log_level, 'handlers': ['queue_listener']},
            loggers={'testboard': {'level': settings.log_level, 'propagate': True}},
        ),
    )
