"""
Infrastructure layer - external service integrations.

- storage: Object storage client (Tencent COS, S3-compatible API)

These wrappers translate between SDK responses and our own models.
"""
