"""
COS Storage Adapter - stores CMS uploads in Tencent Cloud Object Storage.

This package contains the complete adapter:
- core: Storage contract, adapter logic, key handling
- infrastructure: Object storage client (COS via S3-compatible API)
- api: FastAPI host application (upload, delete, serve)
- config: Adapter and application configuration
"""

__version__ = "0.1.0"
