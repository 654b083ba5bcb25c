"""
StoreRate Backend — Middleware Package
=======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Request ID] → [Rate Limit] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation ID for logs and error bodies, 429s included
    2. Rate Limit: abusive auth traffic is rejected before any other work
    3. Logging: method, path, status and duration with the request ID
"""
