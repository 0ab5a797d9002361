"""
Kavin's Catalog Backend — Middleware Package
==============================================

Middleware Chain (request direction):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route

    Rate limiting runs first so throttled clients cost nothing. The request
    ID is set before the access log reads it. Responses travel back through
    the same chain in reverse.
"""
