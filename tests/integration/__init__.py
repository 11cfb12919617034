"""
Integration tests for Taskflow.

Tests use the Flask test clients and demonstrate:
- CRUD operation testing
- Input validation testing
- Session expiry handling across the client and the views
- Statistics consistency with the listing endpoint
"""
