"""
Core Package

Contains the shared building blocks of the gold price cache:
- Settings: environment-derived configuration
- Errors: the failure taxonomy used by every component
- Schemas: Pydantic models for samples, cached rows and HTTP bodies
- Logging: the single logging sink
"""
