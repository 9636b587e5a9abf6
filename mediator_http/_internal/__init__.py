"""Internal modules for mediator-http.

These are implementation details of HttpHelper and not part of the public API.

Modules:
    http - Shared HTTP client configuration
    serialize - Key/value parameter serialization
"""
