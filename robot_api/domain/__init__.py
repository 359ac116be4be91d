"""Pure domain pieces: records, errors, credential and token handling.

Free of FastAPI/HTTP concerns so they can be unit-tested and reused by both
the server and the smoke runner.
"""
__all__ = ["credentials", "errors", "records", "tokens"]
