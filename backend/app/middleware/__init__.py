# Middleware package init
"""
DocTrack Backend — Middleware Package
=======================================

Middleware Chain (order matters):
    Request → [Rate Limit] → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Rate Limit first: over-limit clients are answered before any work
    2. Request ID: correlation ID for log lines and the X-Request-ID header
    3. Logging: one access line per request with status and duration
"""
