"""
Configuration Module

- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: System-wide constants and enums (roles, states, audit actions)

Usage:
------
```python
from ticketdesk.core.config import get_settings
from ticketdesk.core.config.constants import DatabaseRole

settings = get_settings()
role = DatabaseRole.from_flag(settings.database.USE_SECONDARY_DB)
```
"""

from .settings import Settings, get_settings, reload_settings

__all__ = [
    "Settings",
    "get_settings",
    "reload_settings",
]
