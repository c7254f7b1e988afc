"""Built-in auth plugins, one sub-package per auth type.

Each sub-package exports a single :class:`~authfetch.auth.base.AuthPlugin`
subclass. :func:`~authfetch.auth.manager.create_default_manager` registers
all of them.
"""
