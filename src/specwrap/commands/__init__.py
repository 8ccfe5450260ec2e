"""Built-in CLI sub-commands for specwrap.

* :mod:`~specwrap.commands.generate` -- turn a spec into a client module.
* :mod:`~specwrap.commands.inspect` -- preview derived functions without
  writing anything.
* :mod:`~specwrap.commands.config` -- view and modify global settings.

Single commands export a plain callback registered on the root app;
``config`` exports a :class:`typer.Typer` sub-application.
"""
