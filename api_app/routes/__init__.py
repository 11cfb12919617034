"""
Routes package for the Taskflow API.

This package contains route blueprints:
- auth: account endpoints (register, login, current user, profile)
- tasks: task CRUD, statistics snapshot, and the health check
"""
