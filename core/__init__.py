"""core/ -- Kernel of the College Tours API: configuration, error taxonomy, identifiers.

Layer rule: core/ imports only stdlib + third-party libraries.
Every other package may import from core/; core/ imports from none of them.
"""
