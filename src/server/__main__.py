"""Run the document API with ``python -m server``."""

import uvicorn

from mdd.utils.logging_config import configure_logging, get_logger
from server.server_config import SERVER_HOST, SERVER_PORT, SERVER_RELOAD

logger = get_logger(__name__)

if __name__ == "__main__":
    configure_logging()
    logger.info("Starting mdd server", extra={"host": SERVER_HOST, "port": SERVER_PORT, "reload": SERVER_RELOAD})

    # uvicorn's own logging config would replace the mdd handlers.
    uvicorn.run("server.main:app", host=SERVER_HOST, port=SERVER_PORT, reload=SERVER_RELOAD, log_config=None)
