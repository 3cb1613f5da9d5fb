import logging
from typing import Callable, List, Optional, Tuple

from config import DeployConfig
from models.deploy_step import StepResult
from models.push_webhook import PushNotification, QualifyingCommit
from run_log import RunLog
from utils import directory_lock, format_timestamp, run_command, to_display_time

logger = logging.getLogger(__name__)


def sync_steps(config: DeployConfig) -> List[Tuple[str, List[str]]]:
    """The fixed synchronization sequence as (description, command) pairs."""
    return [
        ("Changing working directory... ", ["pwd"]),
        ("Checking changes... ", ["git", "status"]),
        ("Resetting repository... ", ["git", "reset", "--hard", "HEAD"]),
        ("Fetching code from repository... ", ["git", "fetch", config.remote]),
        ("Pulling in changes... ", ["git", "pull", config.remote, config.branch]),
    ]


def collect_commits(notification: PushNotification, config: DeployConfig) -> List[QualifyingCommit]:
    """
    Pick the commits pushed to the tracked branch, in payload order.

    Commit dates are converted to the configured timezone and rendered with
    the configured date format.
    """
    commits = []
    for change in notification.push.changes:
        if not change.targets(config.branch):
            continue
        for record in change.commits:
            if record.type != "commit":
                continue
            if record.date is None:
                raise ValueError(f"Commit by '{record.author.raw}' on branch '{config.branch}' has no date")
            display_date = to_display_time(record.date, config.tzinfo)
            commits.append(QualifyingCommit(
                author=record.author.raw,
                message=record.message,
                date=format_timestamp(display_date, config.date_format),
            ))
    return commits


class DeploymentRunner:
    """
    Runs the synchronization sequence against the working directory.

    Every step runs regardless of how the previous one ended; failures only
    show up in the logged output and in the closing summary line.
    """

    def __init__(self, config: DeployConfig, command_runner: Optional[Callable[..., StepResult]] = None):
        self.config = config
        self.command_runner = command_runner or run_command

    def run(self, run_log: RunLog) -> List[StepResult]:
        def announce_wait():
            run_log.append(f"Another deployment is running in {self.config.directory}, waiting for it to finish...")

        with directory_lock(self.config.directory, on_wait=announce_wait):
            results = []
            for description, command in sync_steps(self.config):
                run_log.append(description)
                result = self.command_runner(command, cwd=self.config.directory, timeout=self.config.timeout)
                run_log.append(result.output)
                results.append(result)

            hook_succeeded = self._run_post_deploy(run_log, results[-1].output)

        failed = [" ".join(result.command) for result in results if not result.succeeded]
        if failed:
            run_log.append(f"Deployment finished, but these steps did not succeed: {', '.join(failed)}", "WARNING")
        elif not hook_succeeded:
            run_log.append("Deployment finished, but the post-deploy hook failed.", "WARNING")
        else:
            run_log.append("Deployment successful.")
        return results

    def _run_post_deploy(self, run_log: RunLog, output: str) -> bool:
        hook = self.config.post_deploy
        if hook is None:
            return True
        try:
            hook(output)
        except Exception as e:
            logger.error(f"Post-deploy hook failed: {e}", exc_info=True)
            run_log.append(f"Post-deploy hook failed: {e!r}", "ERROR")
            return False
        return True


def deploy_push(
        notification: PushNotification,
        commits: List[QualifyingCommit],
        config: DeployConfig,
        run_log: RunLog,
        notifier,
        server_name: str,
        runner: Optional[DeploymentRunner] = None,
):
    """Log the push, deploy when it touched the tracked branch, then mail the report."""
    try:
        run_log.append(
            f"Receiving commit from [{notification.actor.display}] "
            f"to repository [{notification.repository.full_name}]... "
        )

        if not commits:
            run_log.append(f"No commits matched branch [{config.branch}].")
            return

        for commit in commits:
            run_log.append(f"Caught commit by [{commit.author}] at [{commit.date}] with message [{commit.message}]")

        runner = runner or DeploymentRunner(config)
        try:
            runner.run(run_log)
        except Exception as e:
            logger.error(f"Deployment failed: {e}", exc_info=True)
            run_log.append(f"Deployment failed: {e!r}", "ERROR")
    finally:
        notifier.send_report(run_log, config, server_name)
