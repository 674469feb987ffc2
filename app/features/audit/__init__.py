"""
Audit logging feature module.

Formats activity messages from templates and records them.
"""
