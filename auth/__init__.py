"""auth/ -- User accounts, password hashing, and token issuance for Postboard.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or posts/.
api/ imports from auth/, not the other way around.
"""
