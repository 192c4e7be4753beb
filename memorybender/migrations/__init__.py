"""Versioned schema migrations, applied in order by memorybender.migrate."""
