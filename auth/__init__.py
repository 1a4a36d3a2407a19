"""auth/ -- Accounts, password hashing, and session tokens.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or inventory/.
api/ imports from auth/, not the other way around.
"""
