"""
Authentication application.

This app provides accounts, bearer token sessions, profiles, presence
and user discovery.

Key components:
    - User model: Email-based user with a numeric id
    - Profile model: Username, display name, avatar, bio and presence
    - AuthService: Signup, signin, signout and token issuing
    - ProfileService: Profile updates, public profiles and user search
    - BearerTokenAuthentication: Verifies tokens and records activity

Usage:
    from authentication.models import User, Profile
    from authentication.services import AuthService
"""
