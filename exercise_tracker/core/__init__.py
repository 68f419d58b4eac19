"""
Core business logic for exercise tracking.

This module is framework-agnostic - it doesn't import FastAPI, MongoDB,
or any infrastructure concerns. This separation means we can test the
validation and date rules in isolation.
"""
