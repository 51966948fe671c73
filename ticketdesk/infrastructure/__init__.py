"""
Infrastructure Layer

Database connectivity and monitoring.
"""
