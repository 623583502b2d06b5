"""Authentication and authorization.

Users → email/password → signed JWT bearer token. Every protected request
carries the token; the claims (id, email, role) become the request's
CurrentIdentity without a database lookup. Role gates and the ownership
guard both work from that identity.
"""
