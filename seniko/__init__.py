"""
SeNiko API.

Minimal authentication service: user registration and login,
issuing JWT access tokens.
"""
__version__ = "0.1.0"
