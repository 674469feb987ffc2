"""
Installed module registry.

Provides the permissions and restrictions declared by installed extension modules.
"""
