"""
Infrastructure layer - external service integrations.

Each subdirectory wraps an external dependency:
- mongo: Document store persistence

These wrappers translate between external formats and our domain models.
"""
