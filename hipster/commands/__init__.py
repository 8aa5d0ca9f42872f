"""Subcommands of the hipster CLI."""
