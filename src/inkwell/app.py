from litestar import Litestar
from litestar.logging import LoggingConfig

from inkwell.errors import exception_handlers
from inkwell.lifespan import lifespan
from inkwell.logging_middleware import (
    CorrelationFilter,
    CorrelationFormatter,
    CorrelationMiddleware,
    correlation_id_contextvar,
)
from inkwell.routes.book_review import prepare_book_review, publish_book_review
from inkwell.routes.conversation import book_selection, book_summary, plot_summary
from inkwell.routes.dashboard import dashboard
from inkwell.routes.health import health
from inkwell.routes.images import book_cover, letter_reader
from inkwell.routes.interactions import clear_interactions, create_interaction, list_interactions
from inkwell.routes.structure_examples import structure_examples

route_handlers = [
    health,
    book_selection,
    plot_summary,
    book_summary,
    structure_examples,
    book_cover,
    letter_reader,
    list_interactions,
    create_interaction,
    clear_interactions,
    prepare_book_review,
    publish_book_review,
    dashboard,
]

logging_config = LoggingConfig(
    root={
        "level": "INFO",
        "handlers": ["queue_listener"],
        "filters": ["correlation"],
    },
    formatters={
        "standard": {
            "()": CorrelationFormatter,
            "format": "%(asctime)s - %(correlation_id)s - %(levelname)s - %(message)s",
        }
    },
    filters={
        "correlation": {
            "()": CorrelationFilter,
            "contextvar": correlation_id_contextvar,
        }
    },
    loggers={
        "httpx": {
            "level": "INFO",
            "filters": ["correlation"],
            "propagate": True,
        },
        "uvicorn": {
            "level": "INFO",
            "filters": ["correlation"],
            "propagate": True,
        },
        "litestar": {
            "level": "INFO",
            "filters": ["correlation"],
            "propagate": True,
        },
    },
    log_exceptions="debug",
)

app = Litestar(
    route_handlers=route_handlers,
    lifespan=[lifespan],
    logging_config=logging_config,
    middleware=[CorrelationMiddleware(correlation_id_contextvar)],
    exception_handlers=exception_handlers,
)
