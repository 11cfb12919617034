"""Unit tests: no HTTP round trips beyond a throwaway Flask app."""
