"""
Backend package for the heritage information site.

This package provides a FastAPI application for user accounts, quiz
leaderboards, curated cultural content and the festival calendar, plus thin
proxies for third-party lookup and image APIs.
"""
