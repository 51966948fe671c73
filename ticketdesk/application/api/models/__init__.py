"""
API Models Package
==================

Pydantic models for API request/response validation.

ORGANIZATION:
-------------
- admin.py: Database management request/response models
- auth.py: Registration and login models
- tickets.py: Ticket and comment request models
- audit.py: Audit log listing response
"""

from ticketdesk.application.api.models.admin import *  # noqa: F401, F403
from ticketdesk.application.api.models.audit import *  # noqa: F401, F403
from ticketdesk.application.api.models.auth import *  # noqa: F401, F403
from ticketdesk.application.api.models.tickets import *  # noqa: F401, F403
