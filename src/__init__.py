"""
R2 Object Gateway - tool-callable access to S3-compatible object storage.

This package contains the complete application:
- core: Framework-agnostic upload/download logic
- infrastructure: Object storage client (R2 and in-memory mock)
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
