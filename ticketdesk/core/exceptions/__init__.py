"""
Exception Module

Structured exception hierarchy for the ticketing service, grouped by theme.

Module Structure:
-----------------
- **base.py**: TicketDeskError base class + ConfigurationError
- **database.py**: Connection establishment and failover errors
- **audit.py**: Audit trail write errors
- **access.py**: Authentication, authorization, lookup and validation errors

Usage:
------
```python
from ticketdesk.core.exceptions import BothTargetsUnavailableError
```
"""

from ticketdesk.core.exceptions.access import (
    AuthenticationError,
    AuthorizationError,
    ResourceNotFoundError,
    ValidationError,
)
from ticketdesk.core.exceptions.audit import AuditWriteError
from ticketdesk.core.exceptions.base import ConfigurationError, TicketDeskError
from ticketdesk.core.exceptions.database import (
    BothTargetsUnavailableError,
    DatabaseConnectionError,
    DatabaseError,
)

__all__ = [
    # Base
    "TicketDeskError",
    "ConfigurationError",
    # Database
    "DatabaseError",
    "DatabaseConnectionError",
    "BothTargetsUnavailableError",
    # Audit
    "AuditWriteError",
    # Access
    "AuthenticationError",
    "AuthorizationError",
    "ResourceNotFoundError",
    "ValidationError",
]
