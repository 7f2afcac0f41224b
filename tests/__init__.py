"""
Configuration store test suite.

This package contains:
- unit/: Unit tests (in-memory remote clients only)
- integration/: Workspace flows and the HTTP client over a mock transport
"""
