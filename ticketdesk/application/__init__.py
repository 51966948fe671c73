"""
Application Layer

FastAPI app, HTTP routes, request models and business services.
"""
