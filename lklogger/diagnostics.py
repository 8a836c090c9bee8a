import sys

import click


def elog(msg: str, new_line=True, *args):
    """Logs one of lklogger's own diagnostics to stderr."""
    if args:
        msg %= args
    try:
        click.echo(msg, file=sys.stderr, nl=new_line)
    except Exception:
        # stderr itself is gone; there is nowhere left to report to
        pass
