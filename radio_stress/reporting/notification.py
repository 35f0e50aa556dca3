"""Result reporter that sends a notification when an invocation ends."""

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

import aiohttp
from pydantic import Field, SecretStr

from radio_stress.errors import BuildError, NotificationDeliveryError
from radio_stress.models.base import Model
from radio_stress.models.result import InvocationStatus
from radio_stress.reporting.listener import CollectingListener

log = logging.getLogger(__name__)

DEFAULT_SUBJECT_TAG = "RadioStress"


class NotificationConfig(Model):
    """Who receives notifications and when they are sent."""

    sender: str | None = None
    destinations: frozenset[str] = Field(default_factory=frozenset)
    subject_tag: str = DEFAULT_SUBJECT_TAG
    send_only_on_test_failure: bool = False
    send_only_on_invocation_failure: bool = False


@dataclass(frozen=True, kw_only=True)
class NotificationGate:
    """Decides whether an ended invocation is worth a notification."""

    send_only_on_test_failure: bool = False
    send_only_on_invocation_failure: bool = False

    @classmethod
    def from_config(cls, config: NotificationConfig) -> "NotificationGate":
        return cls(
            send_only_on_test_failure=config.send_only_on_test_failure,
            send_only_on_invocation_failure=config.send_only_on_invocation_failure,
        )

    def should_send(self, has_failed_tests: bool, status: InvocationStatus) -> bool:
        if self.send_only_on_test_failure:
            if not has_failed_tests:
                log.debug("Not sending notification: no failures to report")
                return False
        elif (
            self.send_only_on_invocation_failure
            and status is InvocationStatus.SUCCESS
        ):
            log.debug("Not sending notification: invocation succeeded")
            return False
        return True


def invocation_status(error: BaseException | None) -> InvocationStatus:
    """Derive the invocation status from its terminal fault, if any."""
    if error is None:
        return InvocationStatus.SUCCESS
    if isinstance(error, BuildError):
        return InvocationStatus.BUILD_ERROR
    return InvocationStatus.FAILED


@dataclass(frozen=True, kw_only=True)
class Notification:
    """A message ready for delivery."""

    sender: str | None
    to: Sequence[str]
    subject: str
    body: str


class Notifier(ABC):
    """Transport delivering notifications."""

    @abstractmethod
    async def send(self, notification: Notification) -> None:
        """Deliver the notification.

        Raises:
            ValueError: If the notification cannot be addressed
            NotificationDeliveryError: If the transport rejected it

        """


class WebhookNotifierConfig(Model):
    """Configuration of a mail relay reached over HTTP."""

    url: str
    token: SecretStr | None = None
    timeout: float = Field(default=30, gt=0)


@dataclass(frozen=True, kw_only=True)
class WebhookNotifier(Notifier):
    """Posts notifications as JSON to a mail relay endpoint."""

    config: WebhookNotifierConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: WebhookNotifierConfig
    ) -> AsyncGenerator["WebhookNotifier", None]:
        """Create notifier with managed session lifecycle."""
        headers: dict[str, str] = {}
        if config.token is not None:
            headers["Authorization"] = f"Bearer {config.token.get_secret_value()}"
        async with aiohttp.ClientSession(
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=config.timeout),
        ) as session:
            yield cls(config=config, session=session)

    async def send(self, notification: Notification) -> None:
        if not notification.to:
            raise ValueError("Notification has no recipients")
        payload = {
            "from": notification.sender,
            "to": list(notification.to),
            "subject": notification.subject,
            "body": notification.body,
        }
        async with self.session.post(self.config.url, json=payload) as response:
            if response.status >= 300:
                text = await response.text()
                raise NotificationDeliveryError(
                    f"Failed to deliver notification: {response.status} {text}"
                )


class NotificationReporter(CollectingListener):
    """Collects results and notifies the configured destinations at the end.

    Delivery problems are logged and never propagated: a failed notification
    does not fail the invocation.
    """

    def __init__(self, config: NotificationConfig, notifier: Notifier) -> None:
        super().__init__()
        self.config = config
        self.gate = NotificationGate.from_config(config)
        self.notifier = notifier
        self.invocation_error: BaseException | None = None

    @property
    def status(self) -> InvocationStatus:
        return invocation_status(self.invocation_error)

    async def invocation_failed(self, error: BaseException) -> None:
        self.invocation_error = error

    def subject(self) -> str:
        return f"{self.config.subject_tag} result: {self.status}"

    def body(self) -> str:
        lines: list[str] = []
        if self.invocation_error is not None:
            lines.append(f"Invocation failed: {self.invocation_error!r}")
        lines.append(
            f"Test results: {self.num_passed_tests} passed, "
            f"{self.num_failed_tests} failed"
        )
        lines.extend(
            f"'{run.name}' test run metrics: {run.metrics}"
            for run in self.runs
            if run.metrics
        )
        return "\n".join(lines) + "\n"

    async def invocation_ended(self, elapsed: float) -> None:
        if not self.gate.should_send(self.has_failed_tests(), self.status):
            return

        if not self.config.destinations:
            log.error("Failed to send notification: no destination addresses set")
            return

        notification = Notification(
            sender=self.config.sender,
            to=sorted(self.config.destinations),
            subject=self.subject(),
            body=self.body(),
        )
        try:
            await self.notifier.send(notification)
        except (ValueError, OSError, aiohttp.ClientError, NotificationDeliveryError):
            log.exception("Failed to send notification")
            return
        log.info("Sent notification to %s", ", ".join(notification.to))
