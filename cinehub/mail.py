"""Email delivery through the Resend HTTP API."""

import logging
from datetime import datetime
from typing import List, Optional, Union

import aiohttp

from cinehub.config import CinehubConfig
from cinehub.errors import MailSendError

RESEND_API_URL = "https://api.resend.com/emails"


class MailService:
    """
    Sends transactional emails.

    Without a Resend API key the service only logs what it would send.
    """

    def __init__(
        self,
        config: CinehubConfig,
        logger: Optional[logging.Logger] = None,
        timeout: float = 10.0,
    ):
        self.api_key = config.resend_api_key
        self.from_email = config.mail_from
        self.frontend_url = config.frontend_url
        self.logger = logger or logging.getLogger(__name__)
        self.timeout = aiohttp.ClientTimeout(total=timeout)

        if not self.api_key:
            self.logger.warning("Resend API key not configured - emails will be mocked")

    async def send_email(
        self,
        to: Union[str, List[str]],
        subject: str,
        html: Optional[str] = None,
        text: Optional[str] = None,
        from_email: Optional[str] = None,
    ) -> Optional[str]:
        """
        Send an email.

        Returns:
            The provider's email id, or None when mocked

        Raises:
            MailSendError: If the provider rejects the email or is unreachable
        """
        sender = from_email or self.from_email
        recipients = to if isinstance(to, list) else [to]

        if not self.api_key:
            self.logger.info(f"[MOCK] Email sent to: {', '.join(recipients)}")
            self.logger.debug(f"[MOCK] Subject: {subject}")
            self.logger.debug(f"[MOCK] From: {sender}")
            return None

        request_body = {"from": sender, "to": recipients, "subject": subject}
        if html:
            request_body["html"] = html
        if text:
            request_body["text"] = text

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            try:
                async with session.post(
                    RESEND_API_URL, json=request_body, headers=headers
                ) as resp:
                    response_body = await resp.text()

                    if resp.status >= 400:
                        self.logger.error(
                            f"Resend rejected email to {', '.join(recipients)}: "
                            f"HTTP {resp.status} {response_body}"
                        )
                        raise MailSendError(
                            ", ".join(recipients),
                            f"Resend error (HTTP {resp.status}): {response_body}",
                        )

                    data = await resp.json()

            except aiohttp.ClientError as e:
                self.logger.error(f"Failed to reach Resend: {e}")
                raise MailSendError(", ".join(recipients), f"Network error: {e}") from e

        self.logger.info(f"Email sent successfully to: {', '.join(recipients)}")
        self.logger.debug(f"Email ID: {data.get('id')}")
        return data.get("id")

    async def send_welcome_email(self, to: str, user_name: str) -> None:
        await self.send_email(
            to,
            subject="Welcome to CineHub!",
            html=render_welcome_html(user_name, self.frontend_url),
            text=(
                f"Hi {user_name}! Welcome to CineHub, your movie collection manager. "
                f"Get started at {self.frontend_url}"
            ),
        )

    async def send_release_reminder(
        self, to: str, movie_title: str, release_date: datetime
    ) -> None:
        """Tell a user that a movie in their collection releases today."""
        formatted_date = release_date.strftime("%B %d, %Y")
        await self.send_email(
            to,
            subject=f"{movie_title} - Releasing Today!",
            html=render_release_reminder_html(
                movie_title, formatted_date, self.frontend_url
            ),
            text=(
                f'Reminder: "{movie_title}" releases today ({formatted_date})! '
                f"Don't miss it: {self.frontend_url}/movies"
            ),
        )


def render_welcome_html(user_name: str, app_url: str) -> str:
    return f"""
<!DOCTYPE html>
<html>
  <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
    <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
      <h1>CineHub</h1>
      <h2>Hi, {user_name}!</h2>
      <p>Welcome to <strong>CineHub</strong>. You can now:</p>
      <ul>
        <li>Add your favourite movies</li>
        <li>Upload posters and backdrops</li>
        <li>Get release reminders</li>
        <li>Search and filter your collection</li>
      </ul>
      <p><a href="{app_url}">Get started</a></p>
    </div>
  </body>
</html>
"""


def render_release_reminder_html(movie_title: str, formatted_date: str, app_url: str) -> str:
    return f"""
<!DOCTYPE html>
<html>
  <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
    <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
      <h1>Release Reminder</h1>
      <p style="text-align: center; font-size: 18px;">The big day is here!</p>
      <p style="text-align: center; font-size: 24px;">{movie_title}</p>
      <p style="text-align: center;"><strong>{formatted_date}</strong></p>
      <p><strong>{movie_title}</strong>, which you added to your collection, releases today.</p>
      <p><a href="{app_url}/movies">View my collection</a></p>
    </div>
  </body>
</html>
"""
