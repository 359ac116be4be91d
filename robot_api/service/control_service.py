from __future__ import annotations

from ..domain.credentials import CredentialVerifier
from ..domain.errors import CommandNotFoundError
from ..domain.records import Command, RobotStatus
from ..domain.tokens import TokenAuthenticator, TokenIssuer
from ..logging_conf import get_logger
from ..storage.commands import CommandStore
from ..storage.status import StatusRepository

__all__ = ["ControlService"]

logger = get_logger("service.control")


class ControlService:
    """Use-cases behind the HTTP routes.

    Holds every collaborator explicitly; one instance is built per app by
    create_app() and shared by all requests.
    """

    def __init__(
        self,
        *,
        verifier: CredentialVerifier,
        issuer: TokenIssuer,
        authenticator: TokenAuthenticator,
        commands: CommandStore,
        status: StatusRepository,
    ) -> None:
        self.verifier = verifier
        self.issuer = issuer
        self.authenticator = authenticator
        self.commands = commands
        self.status = status

    # ------------------------
    # Auth
    # ------------------------

    def login(self, *, username: str, password: str) -> str:
        """Verify credentials and return a fresh access token."""
        subject = self.verifier.verify(username, password)
        token = self.issuer.issue(subject)
        logger.info("auth.token_issued", extra={"event": "auth_token_issued", "subject": subject})
        return token

    def authenticate(self, token: str | None) -> str:
        return self.authenticator.authenticate(token)

    # ------------------------
    # Commands
    # ------------------------

    def create_command(self, *, command_text: str, robot: str, user: str, subject: str) -> Command:
        record = self.commands.create(command_text, robot, user)
        logger.info(
            "command.create",
            extra={
                "event": "command_create",
                "command_id": record.id,
                "robot": robot,
                "subject": subject,
            },
        )
        return record

    def update_command(
        self, *, command_id: int, command_text: str, robot: str, user: str, subject: str
    ) -> Command:
        try:
            record = self.commands.update(command_id, command_text, robot, user)
        except CommandNotFoundError:
            logger.warning(
                "command.not_found",
                extra={"event": "command_not_found", "command_id": command_id, "op": "update"},
            )
            raise
        logger.info(
            "command.update",
            extra={"event": "command_update", "command_id": command_id, "subject": subject},
        )
        return record

    def get_command(self, *, command_id: int) -> Command:
        record = self.commands.get_by_id(command_id)
        if record is None:
            logger.warning(
                "command.not_found",
                extra={"event": "command_not_found", "command_id": command_id, "op": "get"},
            )
            raise CommandNotFoundError(command_id)
        logger.info("command.get", extra={"event": "command_get", "command_id": command_id})
        return record

    def history(self) -> list[Command]:
        records = self.commands.list_all()
        logger.info("history.list", extra={"event": "history_list", "count": len(records)})
        return records

    # ------------------------
    # Status
    # ------------------------

    def current_status(self) -> RobotStatus:
        snapshot = self.status.current()
        logger.info("status.get", extra={"event": "status_get", "status": snapshot.status})
        return snapshot
