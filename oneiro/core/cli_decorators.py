#!/usr/bin/env python3
"""
cli_decorators.py
-------------------
Click decorator factory for oneiro CLI groups.

Usage:
    from oneiro.core.cli_decorators import oneiro_cli_group

    @oneiro_cli_group("scrape")
    def cli(ctx):
        '''oneiro - Dream journal metrics extraction'''
"""
from functools import wraps
from pathlib import Path
from typing import Callable

import click

from oneiro.core.cli import setup_logger
from oneiro.core.cli_options import log_dir_option, verbose_option


def oneiro_cli_group(component_name: str) -> Callable:
    """
    Decorator factory for consistent CLI groups.

    Adds --log-dir and --verbose and fills the click context with:
        ctx.obj["log_dir"]: Path - Log directory
        ctx.obj["verbose"]: bool - Verbose flag
        ctx.obj["logger"]: OneiroLogger - Logger for this component

    Args:
        component_name: Component identifier for logging (e.g. "oneiro")
    """
    def decorator(f: Callable) -> Callable:
        @click.group()
        @log_dir_option
        @verbose_option
        @click.pass_context
        @wraps(f)
        def wrapper(ctx: click.Context, log_dir: str, verbose: bool):
            ctx.ensure_object(dict)
            ctx.obj["log_dir"] = Path(log_dir)
            ctx.obj["verbose"] = verbose
            ctx.obj["logger"] = setup_logger(Path(log_dir), component_name)
            return f(ctx)

        return wrapper
    return decorator
