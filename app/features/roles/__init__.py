"""
Role management feature module.

Builds the permission/restriction catalog from the application and installed
modules, and translates between stored roles and their editable form.
"""
