"""
Sigil - Signing keys and secret lookup.
"""
