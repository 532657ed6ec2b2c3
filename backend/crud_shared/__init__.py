"""
Shared infrastructure for crud_engine: configuration, logging,
database session plumbing, error types and validators.
"""
