"""HTTP plumbing for talking to the corp API.

Security notes:
- Treat server responses as untrusted input.
- Avoid printing or logging raw file bytes or access tokens.
"""
