"""
VidHub account service.

User registration, login, JWT access/refresh token rotation and account
management on top of the ``common`` infrastructure package.
"""
