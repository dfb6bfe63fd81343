"""
decision_journal.reporting: Terminal output for CLI commands.

Formats analytics models already computed elsewhere; it does not query
the database or compute anything itself.

Modules:
  formatters: ASCII terminal formatters for Typer CLI commands.
"""
