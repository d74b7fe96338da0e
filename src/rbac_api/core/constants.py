"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# String field lengths
MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 255
MAX_ROLE_NAME_LENGTH = 100
MAX_PERMISSION_NAME_LENGTH = 100
MAX_PERMISSION_RESOURCE_LENGTH = 100
MAX_PERMISSION_ACTION_LENGTH = 50
MAX_DESCRIPTION_LENGTH = 255

# Password requirements
MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 128
BCRYPT_ROUNDS = 12

# Token settings
DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24
ACCESS_TOKEN_JTI_LENGTH = 32
ACCESS_TOKEN_TYPE = "access"

# Role granted administrative access to the RBAC endpoints
ADMIN_ROLE_NAME = "admin"

# Secret key requirements
MIN_SECRET_KEY_LENGTH = 32
DEFAULT_INSECURE_SECRET = "change-me-in-production"
