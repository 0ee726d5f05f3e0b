"""Initial configuration of a booted GHES appliance through the management API."""

import logging
import time
from pathlib import Path
from typing import Any, Callable, Optional, Union

import requests

from gheboot.config import Config
from gheboot.models import ConfigurationAttempt, ConfigurationOutcome

logger = logging.getLogger(__name__)

CONFIG_INIT_PATH = "/manage/v1/config/init"


def classify_response(body: str, marker: str = Config.NOT_READY_MARKER) -> bool:
    """Return True when ``body`` says the appliance is not ready yet.

    This is a plain substring test. A body that mentions the marker for some
    other reason is still treated as not ready, and any body without it counts
    as done even when it reports an unrelated failure.
    """
    return marker in body


class InitialConfigClient:
    """Uploads the license and sets the root site password, retrying until the appliance accepts."""

    def __init__(
        self,
        attempts: int = 5,
        delay: float = 45,
        insecure: bool = False,
        session: Optional[Any] = None,
        sleep: Callable[[float], None] = time.sleep,
        timeout: Optional[float] = Config.CONFIG_TIMEOUT,
        user: str = Config.API_USER,
    ):
        self.attempts = attempts
        self.delay = delay
        self.insecure = insecure
        self.http = session if session is not None else requests
        self.sleep = sleep
        self.timeout = timeout
        self.user = user

    def post_config(self, ip: str, password: str, license_file: Union[str, Path]) -> str:
        """
        Send one multipart POST to the appliance's config/init endpoint.

        Transport errors are returned as text instead of raised, so they are
        classified like any other response body.
        """
        url = f"https://{ip}{CONFIG_INIT_PATH}"
        try:
            with open(license_file, "rb") as license_fh:
                response = self.http.post(
                    url,
                    auth=(self.user, password),
                    files={"license": license_fh},
                    data={"password": password},
                    verify=not self.insecure,
                    allow_redirects=True,
                    timeout=self.timeout,
                )
            return response.text  # type: ignore[no-any-return]
        except requests.RequestException as e:
            logger.warning(f"⚠️  Request to {url} failed: {e}")
            return str(e)

    def configure(self, ip: str, password: str, license_file: Union[str, Path]) -> ConfigurationOutcome:
        """
        Run the retry loop against ``ip``.

        Stops at the first response without the not-ready marker, or after
        ``attempts`` tries. Sleeps ``delay`` seconds between tries.
        """
        outcome = ConfigurationOutcome(ip=ip)

        for number in range(1, self.attempts + 1):
            logger.info(
                f"🔐 Configuring root site password and uploading license file (attempt {number} of {self.attempts})"
            )
            body = self.post_config(ip, password, license_file)
            attempt = ConfigurationAttempt(number=number, body=body, not_ready=classify_response(body))
            outcome.attempts.append(attempt)

            if not attempt.not_ready:
                logger.info(f"✅ Initial configuration completed for {ip}")
                break

            logger.debug(f"Appliance not ready: {body}")
            if number < self.attempts:
                self.sleep(self.delay)
        else:
            logger.warning(f"❌ Appliance at {ip} was still not ready after {self.attempts} attempts")

        return outcome
