"""auth/ -- Authentication and session management package for MedAI.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/, analysis/, or client/.
api/ imports from auth/, not the other way around.
"""
