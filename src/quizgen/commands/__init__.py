"""Subcommand implementations dispatched by :mod:`quizgen.cli`."""
