"""
Auth System

Handles credential verification and the access/refresh token lifecycle.
"""
