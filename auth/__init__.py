"""
auth — User authentication module.

Provides:
  • Password hashing (bcrypt, run off the event loop)
  • Signed, expiring bearer tokens (HMAC-SHA256)
  • Credential store with case-insensitive unique emails
  • Register / Login / current-user API routes
  • ``get_current_user`` FastAPI dependency
"""
