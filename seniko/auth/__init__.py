"""
Authentication service for SeNiko.

This package provides:
- User registration and login
- Password hashing
- JWT access token handling
- Request rate limiting
"""
