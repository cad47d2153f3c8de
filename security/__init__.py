"""
security/ - Credentials
=======================
Password hashing for user accounts.
"""
