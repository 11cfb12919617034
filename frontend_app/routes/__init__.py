"""Routes package for the web views (``views``: HTML pages)."""
