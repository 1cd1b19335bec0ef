from fastapi import FastAPI

from dockclean.api import cleanup
from dockclean.api.cleanup import get_settings
from dockclean.core.logging import setup_logging

setup_logging(get_settings().LOG_LEVEL)

app = FastAPI(title="dockclean – Docker image cleanup")

app.include_router(cleanup.router)
