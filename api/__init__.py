"""api/ -- FastAPI application, transport models, and route handlers.

Layer rule: api/ may import from auth/, tours/, and core/. Nothing imports api/
except the assembly file asgi.py and the tests.
"""
