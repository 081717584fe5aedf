"""
User System

Owns the user record and its persistence.
"""
