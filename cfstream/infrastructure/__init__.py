"""
Infrastructure layer - external service integrations.

- stream: Cloudflare Stream API client (plus an in-memory mock)
"""
