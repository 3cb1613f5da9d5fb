# routers/health.py

import os
import logging

from fastapi import APIRouter, Depends

from config import DeployConfig
from dependencies import get_deploy_config

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health", summary="Health Check Endpoint")
def health_check(deploy_config: DeployConfig = Depends(get_deploy_config)):
    logger.info("Health check endpoint was called.")
    return {
        "status": "OK",
        "branch": deploy_config.branch,
        "directory_present": os.path.isdir(deploy_config.directory),
    }
