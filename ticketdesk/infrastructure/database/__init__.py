"""
Database Layer

Target registry, connection establisher, failover orchestrator and the
process-wide connection manager, plus the collection repositories.
"""

from .connection_manager import (
    ConnectionStatus,
    DatabaseConnectionManager,
    ProbeResult,
    SwitchResult,
    close_database,
    get_connection_manager,
    init_database,
)
from .establisher import ConnectionEstablisher, DatabaseConnection
from .failover import FailoverOrchestrator
from .targets import ConnectionTarget, TargetRegistry

__all__ = [
    "ConnectionTarget",
    "TargetRegistry",
    "ConnectionEstablisher",
    "DatabaseConnection",
    "FailoverOrchestrator",
    "DatabaseConnectionManager",
    "ConnectionStatus",
    "ProbeResult",
    "SwitchResult",
    "get_connection_manager",
    "init_database",
    "close_database",
]
