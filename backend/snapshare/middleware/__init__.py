"""
SnapShare Backend: Middleware Package
=======================================

Request → [Request ID] → [Access Logging] → [GZip] → [CORS] → Route Handler

Request ID runs first so the access log line and any failure envelope carry
the same correlation ID.
"""
