"""
Tests for authentication app.

This package contains test modules for:
- test_models.py: User and Profile model tests
- test_services.py: AuthService and ProfileService tests
- test_views.py: API endpoint tests
- test_backends.py: Bearer authentication and presence tests
- test_tasks.py: Celery task tests
- test_integration.py: End-to-end user journeys

Usage:
    pytest app/authentication/tests/
"""
