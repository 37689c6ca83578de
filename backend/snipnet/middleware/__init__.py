"""
SnipNet Backend - Middleware Package
=====================================

Middleware Chain (request direction):
    [Request ID] → [Logging] → [Rate Limit] → [GZip] → [CORS] → Route Handler

    1. Request ID first: every log line and error body, 429s included,
       carries the correlation id
    2. Logging: one access line per request with status and duration
    3. Rate limit: reject floods before any database work
"""
