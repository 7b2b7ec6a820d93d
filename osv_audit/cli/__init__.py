"""Command-line interface for osv-audit."""
