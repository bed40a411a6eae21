"""
Multi-user to-do list service.

Users register and log in to obtain a signed bearer token, then manage their
own flat list of text tasks. Every task operation is scoped to the owner
resolved from the token.
"""

__version__ = "1.0.0"
