from urllib.parse import urlparse

import uvicorn

from mfgops.core.config import settings
from mfgops.logger_config import logger

if __name__ == '__main__':
    parsed_url = urlparse(settings.LOCAL_URL)
    host = parsed_url.hostname or "127.0.0.1"
    port = parsed_url.port or 8000

    logger.info(f"Server running at: {settings.LOCAL_URL}")
    uvicorn.run("mfgops.main:app", host=host, port=port, reload=settings.APP_ENV == "local")
