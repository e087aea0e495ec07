"""Command line interface for the Trello API wrapper."""

from trello_api.cli.commands import cli

__all__ = ['cli']
