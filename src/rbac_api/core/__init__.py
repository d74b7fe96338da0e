"""Core infrastructure: database, auth, errors, logging and the RBAC engine."""
