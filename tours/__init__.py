"""tours/ -- Tour, Course and Event documents and their persistence.

Layer rule: tours/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or auth/.
"""
