"""
Revenue Sentinel API Module
===========================

Direct imports from canonical paths:
    from src.api.main import app, create_app
    from src.api.settings import api_settings
    from src.api.errors import APIError, NotFoundError
"""
