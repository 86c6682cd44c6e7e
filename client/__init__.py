"""client/ -- Python client for the MedAI API session endpoints.

Layer rule: client/ imports only stdlib, third-party libraries, and core/.
It speaks to the server over HTTP and never imports api/, auth/, or analysis/.
"""

from client.session import AuthResult, SessionStore

__all__ = ["AuthResult", "SessionStore"]
