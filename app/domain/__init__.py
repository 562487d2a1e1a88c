"""
Domain Package
==============
Entities, value objects and store protocols of the pickup domain, plus the
exception hierarchy shared by every layer.
"""
