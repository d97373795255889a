# store_rating/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: Application initialization and default admin creation
- db: Database configuration and connection management
- errors: Error taxonomy and the exception handlers that render it
- security: Password hashing and policy, JWT token creation/validation
"""
