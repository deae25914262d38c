"""
e-Foncier Backend: Middleware Package
======================================

Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Rate Limit] → [Request ID] → [Access Log] → [GZip] → [CORS] → Route

    The request ID is assigned before the access log runs, so every log line
    of a request carries the same ID; the response travels back through the
    same chain in reverse order.
"""
