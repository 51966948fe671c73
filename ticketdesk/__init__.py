"""
TicketDesk: role-based support ticketing service with primary/secondary
MongoDB failover and an append-only audit trail.
"""

__version__ = "1.0.0"
