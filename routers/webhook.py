# routers/webhook.py

import socket
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from config import DeployConfig
from dependencies import get_deploy_config, get_notifier
from deployer import collect_commits, deploy_push
from models.push_webhook import PushNotification
from notifications import Notifications
from run_log import RunLog

router = APIRouter()
logger = logging.getLogger(__name__)


def get_server_name(request: Request, deploy_config: DeployConfig) -> str:
    return deploy_config.server_name or request.url.hostname or socket.gethostname()


@router.api_route("/webhook", methods=["GET", "POST"], summary="Push Webhook Endpoint")
async def handle_webhook(
        request: Request,
        background_tasks: BackgroundTasks,
        deploy_config: DeployConfig = Depends(get_deploy_config),
        notifier: Notifications = Depends(get_notifier),
):
    """
    Accept a push notification and deploy the tracked branch.

    The response goes out first. Deployment and the emailed report run
    afterwards as a background task, so a slow git or SMTP server never
    holds the webhook connection open.
    """
    logger.info("Webhook endpoint was called.")
    body_bytes = await request.body()
    server_name = get_server_name(request, deploy_config)

    run_log = RunLog(deploy_config.date_format, deploy_config.tzinfo)
    run_log.append(f'Attempting deployment to server "{server_name}" from "{deploy_config.branch}" branch...')

    # 1. Browser probe: nothing to deploy.
    if not body_bytes:
        run_log.append("No commit data in request. Potential request from browser.")
        background_tasks.add_task(notifier.send_report, run_log, deploy_config, server_name)
        return PlainTextResponse("No commit data. Exit.")

    # 2. Parse payload and pick commits for the tracked branch.
    try:
        notification = PushNotification.model_validate_json(body_bytes)
        commits = collect_commits(notification, deploy_config)
    except ValueError as e:
        logger.error(f"Could not decode push payload: {e}")
        run_log.append(f"Could not decode push payload: {e}", "ERROR")
        background_tasks.add_task(notifier.send_report, run_log, deploy_config, server_name)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Invalid push payload"}
        )

    logger.info(
        f"Received push for repo: {notification.repository.full_name}, "
        f"{len(commits)} commit(s) on branch {deploy_config.branch}"
    )

    # 3. Deploy and report after responding.
    background_tasks.add_task(
        deploy_push, notification, commits, deploy_config, run_log, notifier, server_name
    )

    if commits:
        message = f"Deployment started for branch '{deploy_config.branch}'."
    else:
        message = f"No commits matched branch '{deploy_config.branch}'. Deployment skipped."
    return {"message": message, "commits": len(commits)}
