"""auth/ -- Authentication and authorization package for the College Tours API.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or tours/.
api/ imports from auth/, not the other way around.
"""
