"""Backtracking grammar for the definition language.

``cursor`` and ``segments`` hold the matching machinery, ``rules`` the
sentence forms and ``parser`` the context stack used by the session.
"""
