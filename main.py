#!/usr/bin/env python3
"""
Main launcher for Yo Assistant.

Simple entry point that starts the conversation loop.
"""

from assistant import cli

if __name__ == "__main__":
    cli()
