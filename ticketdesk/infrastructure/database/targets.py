"""
Connection Target Registry

Resolves the two candidate MongoDB endpoints and owns the "preferred role"
for the lifetime of the process.

STAGE-DB.1: Target resolution

The preferred role starts from ``USE_SECONDARY_DB`` and afterwards changes
only through ``set_preferred_role`` (called by the switch API). The process
environment is never mutated.
"""

from dataclasses import dataclass

from ticketdesk.core.config.constants import VALID_URI_SCHEMES, DatabaseRole, Stage
from ticketdesk.core.config.settings import DatabaseSettings
from ticketdesk.core.exceptions import ConfigurationError
from ticketdesk.core.logging.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ConnectionTarget:
    """One of the two interchangeable database endpoints."""

    role: DatabaseRole
    uri: str


class TargetRegistry:
    """
    Resolves primary/secondary targets from database settings.

    Usage:
        registry = TargetRegistry(settings.database)
        targets = registry.resolve_targets()
        preferred = targets[registry.preferred_role()]
    """

    def __init__(self, settings: DatabaseSettings):
        self._primary_uri = settings.PRIMARY_DB_URI
        self._secondary_uri = settings.SECONDARY_DB_URI
        self._preferred = DatabaseRole.from_flag(settings.USE_SECONDARY_DB)
        self._targets: dict[DatabaseRole, ConnectionTarget] | None = None

    @property
    def primary_configured(self) -> bool:
        return bool(self._primary_uri)

    @property
    def secondary_configured(self) -> bool:
        return bool(self._secondary_uri)

    def resolve_targets(self) -> dict[DatabaseRole, ConnectionTarget]:
        """
        Resolve both targets.

        Returns:
            Mapping of role to target, always containing both roles

        Raises:
            ConfigurationError: If either URI is missing or malformed
        """
        if self._targets is None:
            self._targets = {
                DatabaseRole.PRIMARY: self._build_target(DatabaseRole.PRIMARY, self._primary_uri),
                DatabaseRole.SECONDARY: self._build_target(DatabaseRole.SECONDARY, self._secondary_uri),
            }
        return self._targets

    def target_for(self, role: DatabaseRole) -> ConnectionTarget:
        return self.resolve_targets()[role]

    def preferred_role(self) -> DatabaseRole:
        return self._preferred

    def set_preferred_role(self, role: DatabaseRole) -> None:
        if role is not self._preferred:
            logger.info(
                "Preferred database role changed",
                stage=Stage.DB_REGISTRY,
                previous_role=self._preferred.value,
                preferred_role=role.value,
            )
        self._preferred = role

    @staticmethod
    def _build_target(role: DatabaseRole, uri: str | None) -> ConnectionTarget:
        if not uri:
            raise ConfigurationError(
                "Database URIs are not configured in environment variables",
                details={"missing": f"{role.value.upper()}_DB_URI"},
            )

        uri = uri.strip()
        if not uri.startswith(VALID_URI_SCHEMES) or len(uri) <= len(uri.split("://", 1)[0]) + 3:
            raise ConfigurationError(
                f"{role.value.capitalize()} database URI is malformed",
                details={"role": role.value, "expected_schemes": list(VALID_URI_SCHEMES)},
            )

        return ConnectionTarget(role=role, uri=uri)
