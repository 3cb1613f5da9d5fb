# main.py

import logging
from fastapi import FastAPI

from config import DEBUG_MODE
from logging_config import setup_logging

# Routers
from routers.health import router as health_router
from routers.webhook import router as webhook_router

# Initialize logging once
setup_logging(DEBUG_MODE)

logger = logging.getLogger(__name__)
logger.info("Starting the PushDeploy application...")

app = FastAPI(
    title="PushDeploy",
    description="Deploys a git working copy when commits land on the tracked branch",
    version="1.0.0",
)

app.include_router(health_router)
app.include_router(webhook_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
