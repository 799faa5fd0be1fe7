"""api/ -- FastAPI application, routes, and HTTP error mapping for Postboard.

Layer rule: api/ may import from auth/, posts/, and core/. Nothing imports from api/.
"""
