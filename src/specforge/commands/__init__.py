"""Built-in CLI sub-commands for specforge.

This package groups the Typer sub-command modules that form the CLI's
top-level command tree:

* :mod:`~specforge.commands.inspect` -- read-only views of a document: info,
  operations with their extension facets, the route map, and expanded schemas.
* :mod:`~specforge.commands.validate` -- run the document contract and the
  extension validators.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``inspect``) or a plain callback function
registered directly on the root app (for single commands like ``validate``).
"""
