"""Render module models to importable Python source.

The emitter consumes a :class:`~specwrap.models.ModuleDescriptor` and writes
either a single module or, for large APIs, a package of chunked modules.
Generated code delegates every request to :mod:`specwrap.runtime`.
"""

from specwrap.emitter.renderer import (
    build_function_view,
    create_jinja_env,
    emit_module,
    render_module,
)

__all__ = ["build_function_view", "create_jinja_env", "emit_module", "render_module"]
