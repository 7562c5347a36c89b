"""
Auth service: user registration and authentication over FastAPI.
"""
__version__ = "0.1.0"
