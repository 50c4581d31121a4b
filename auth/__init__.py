"""auth/ -- Authentication core for bootcamp-auth.

Credential hashing, session tokens, the user store and the register/login
flows. The Auth Gate in auth/dependencies.py is the only module that knows
about FastAPI.

Layer rule: auth/ imports only stdlib + third-party libraries.
It does NOT import from api/ or core/ (core.config is referenced for type
checking only). api/ imports from auth/, not the other way around.
"""
