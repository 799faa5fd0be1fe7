"""posts/ -- Password-gated posts for Postboard.

Layer rule: posts/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or auth/. Posts are not linked to user accounts.
"""
