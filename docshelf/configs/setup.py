from typing import Optional

from docshelf.configs.settings import Settings
from docshelf.crud.base import SoftDeleteRepository
from docshelf.databases.mongodb import MongoDB
from docshelf.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def _setup_logging(config: Settings) -> None:
    """Setup logging from the application settings"""
    setup_logging(
        level="DEBUG" if config.APP_DEBUG else "INFO",
        app_name=config.APP_NAME,
        enable_json=config.APP_ENV == "prod",
    )
    logger.info("Logging configuration initialized")


async def init_docshelf(
    server_address: Optional[str] = None,
    database_name: Optional[str] = None,
    *,
    settings: Optional[Settings] = None,
    configure_logging: bool = False,
) -> SoftDeleteRepository:
    """
    Connect to MongoDB and return a repository bound to that connection

    Args:
        server_address: ``host:port`` or a ``mongodb://`` URI, overrides MONGO_ADDRESS
        database_name: Database to use, overrides MONGO_DB
        settings: Base settings, read from the environment when omitted
        configure_logging: Whether to install docshelf's logging handlers
    """
    config = settings or Settings()
    overrides = {}
    if server_address:
        overrides["MONGO_ADDRESS"] = server_address
    if database_name:
        overrides["MONGO_DB"] = database_name
    if overrides:
        config = config.model_copy(update=overrides)

    if configure_logging:
        _setup_logging(config)

    mongodb = MongoDB(config)
    try:
        await mongodb.connect()
    except Exception as e:
        logger.error(f"Failed to initialize MongoDB: {str(e)}")
        raise
    logger.info("MongoDB connection established successfully")

    return SoftDeleteRepository(mongodb)
