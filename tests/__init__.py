"""
Test suite for Taskflow.

This package contains:
- unit/: models, tokens, validation, session stores, API client, config
- integration/: the REST API, the client managers and the HTML views,
  all running against a real SQLite database
"""
