"""
Authentication for the auth service.

This package provides:
- User registration and login
- Password hashing
- JWT access and refresh tokens, with refresh tokens stored for revocation
- Role-based access control
"""
