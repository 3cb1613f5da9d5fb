import os
import html
import smtplib
import logging
from email.mime.text import MIMEText
from typing import Optional

import requests

from config import DeployConfig
from run_log import RunLog

logger = logging.getLogger(__name__)

DEFAULT_SENDER = "NoReply <noreply@localhost>"


class Notifications:
    def __init__(self, config: Optional[dict] = None):
        self.config = config or {}
        notifications = self.config.get('notifications', {}) or {}
        self.slack_webhook_url = notifications.get('slack_webhook_url', "")
        email_config = notifications.get('email', {}) or {}

        # Sensitive settings can come from the environment (e.g., for CI/CD)
        self.smtp_server = os.getenv("SMTP_SERVER", email_config.get('smtp_server', "localhost"))
        self.smtp_port = int(os.getenv("SMTP_PORT", email_config.get('smtp_port', 25)))
        self.use_tls = os.getenv("EMAIL_USE_TLS", str(email_config.get('use_tls', False))).lower() == "true"
        self.username = os.getenv("EMAIL_USERNAME", email_config.get('username'))
        self.password = os.getenv("EMAIL_PASSWORD", email_config.get('password'))
        self.sender = email_config.get('sender_email', DEFAULT_SENDER)

        logger.debug(
            f"Email Config - Server: {self.smtp_server}, Port: {self.smtp_port}, "
            f"Use TLS: {self.use_tls}, Username: {self.username}, Sender: {self.sender}"
        )

    @staticmethod
    def build_subject(config: DeployConfig, server_name: str) -> str:
        return f'MONITOR: Deployment to server "{server_name}" from "{config.branch}" branch'

    @staticmethod
    def build_html_body(run_log: RunLog) -> str:
        message = '<p>Deployment attempt log: </p>\n'
        lines = run_log.lines()
        if lines:
            content = html.escape("\n".join(lines)).replace("\n", "<br />\n")
            message += f'<p>{content}</p>'
        else:
            message += '<p>No log data available</p>'
        return message

    def send_slack_message(self, message: str):
        """
        Send a message to Slack via a webhook URL.
        """
        if not self.slack_webhook_url:
            logger.debug("Slack webhook URL not configured. Skipping Slack notification.")
            return
        payload = {"text": message}
        try:
            response = requests.post(self.slack_webhook_url, json=payload, timeout=10)
            if response.status_code != 200:
                logger.error(f"Failed to send Slack message. Code: {response.status_code}, Resp: {response.text}")
            else:
                logger.info("Slack message sent successfully.")
        except requests.RequestException as e:
            logger.error(f"Exception while sending Slack message: {e}")

    def send_email(self, recipient: str, subject: str, html_body: str) -> bool:
        """
        Email an HTML message to a single recipient. Returns whether the SMTP server accepted it.
        """
        if not recipient:
            logger.warning("No report recipient configured. Skipping Email notification.")
            return False

        msg = MIMEText(html_body, 'html', 'utf-8')
        msg['From'] = self.sender
        msg['To'] = recipient
        msg['Subject'] = subject

        try:
            if self.smtp_port == 465:
                server = smtplib.SMTP_SSL(self.smtp_server, self.smtp_port, timeout=10)
            else:
                server = smtplib.SMTP(self.smtp_server, self.smtp_port, timeout=10)
                server.ehlo()
                if self.use_tls:
                    server.starttls()
                    server.ehlo()

            try:
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(msg)
            finally:
                server.quit()
            logger.info(f"Email sent successfully to {recipient} with subject '{subject}'.")
            return True
        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP Authentication Error: {e}")
        except smtplib.SMTPConnectError as e:
            logger.error(f"SMTP Connection Error: {e}")
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP Error: {e}")
        except Exception as e:
            logger.error(f"Unexpected error while sending email: {e}")
        return False

    def send_report(self, run_log: RunLog, config: DeployConfig, server_name: str) -> bool:
        """
        Send the deployment report for one request (Email + Slack).

        Delivery problems are logged and never raised.
        """
        subject = self.build_subject(config, server_name)
        self.send_slack_message(f"{subject}\n" + "\n".join(run_log.lines()))
        return self.send_email(config.email, subject, self.build_html_body(run_log))
