"""
Exercise Tracker - register users, log exercises, and query their history.

This package contains the complete application:
- core: Framework-agnostic business logic
- infrastructure: MongoDB integration
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
