#!/usr/bin/env python3
"""Main entry point for Trello API CLI."""

from trello_api.cli.commands import cli

if __name__ == '__main__':
    cli()
