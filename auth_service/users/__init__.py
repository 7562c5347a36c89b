"""
User administration endpoints.
"""
