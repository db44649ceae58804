#!/usr/bin/env python3

"""
Command-line interface for skinlock
"""

import os
import sys
import logging
import argparse
from tqdm import tqdm
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from .config import Config
from .core import SkinSet
from .errors import SkinLockError
from .lock import LOCK_DIR
from .store import open_store

logger = logging.getLogger(__name__)

console = Console()


def _yes_no(value):
    return "[green]yes[/green]" if value else "[red]no[/red]"


def print_status(status):
    table = Table(box=box.ROUNDED, show_header=False, border_style="bright_blue")
    table.add_column("Item", style="cyan")
    table.add_column("Value")

    table.add_row("installed", _yes_no(status.installed))
    table.add_row("in use", _yes_no(status.in_use))
    table.add_row("readable", _yes_no(status.readable))
    table.add_row("writable", _yes_no(status.writable))
    table.add_row("locked", _yes_no(status.locked))

    console.print(Panel(table, title=f"[bold cyan]{status.name}[/bold cyan]", border_style="bright_blue"))


def print_scan(statuses):
    table = Table(box=box.ROUNDED, border_style="bright_blue")
    table.add_column("Skin", style="cyan")
    for column in ("installed", "in use", "readable", "writable", "locked"):
        table.add_column(column, justify="center")

    for s in statuses:
        table.add_row(s.name, _yes_no(s.installed), _yes_no(s.in_use),
                      _yes_no(s.readable), _yes_no(s.writable), _yes_no(s.locked))

    installed = sum(1 for s in statuses if s.installed)
    locked = sum(1 for s in statuses if s.locked)
    console.print(table)
    console.print(Panel(
        f"{len(statuses):,} skins, [green]{installed:,} installed[/green], [yellow]{locked:,} locked[/yellow]",
        title="[bold cyan]scan result[/bold cyan]",
        border_style="bright_blue"
    ))


def print_results(messages):
    for message in messages:
        console.print(f"[bold red]{message}[/bold red]")


def cmd_status(skins, args):
    print_status(skins.status(args.name))
    return 0


def cmd_lock(skins, args):
    skin = skins.handle(args.name)
    if not skin.acquire():
        print_results(skin.results)
        return 1
    console.print(f"[green]locked {skin.name}[/green]")
    return 0


def cmd_unlock(skins, args):
    # The marker may belong to another process, so go through the primitive.
    skin = skins.handle(args.name)
    if not skin.remove_marker(LOCK_DIR):
        print_results(skin.results)
        return 1
    console.print(f"[green]unlocked {skin.name}[/green]")
    return 0


def cmd_scan(skins, args):
    names = skins.list_skins()
    pbar = tqdm(
        total=len(names),
        desc="scanning skins",
        unit="skins",
        bar_format="{desc:<30} |{bar:50}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]",
        colour="cyan",
        ncols=120,
        leave=False
    )

    def progress(name):
        pbar.set_description(f"○ {name[:30]:<30}")
        pbar.update(1)

    skins.progress_callback = progress
    try:
        statuses = skins.scan()
    finally:
        pbar.close()
    print_scan(statuses)
    return 0


def build_parser():
    parser = argparse.ArgumentParser(prog='skinlock', description='Skin directory lock tool')
    parser.add_argument('--config-dir', default=os.getcwd(), help='Directory holding .skinlock.yml')
    parser.add_argument('--base-path', help='Skin base directory')
    parser.add_argument('--store', help='Record store: manifest path or s3://bucket/prefix')
    parser.add_argument('--timeout', type=float, help='Seconds to wait for a held lock')
    parser.add_argument('--poll-interval', type=float, help='Seconds between lock attempts')
    parser.add_argument('--endpoint-url', help='S3-compatible service endpoint URL')
    parser.add_argument('--region', help='Region name for the S3 store')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', required=True)

    status = subparsers.add_parser('status', help='Show the state of one skin')
    status.add_argument('name')
    status.set_defaults(func=cmd_status)

    lock = subparsers.add_parser('lock', help='Lock a skin directory')
    lock.add_argument('name')
    lock.set_defaults(func=cmd_lock)

    unlock = subparsers.add_parser('unlock', help='Remove a skin lock marker')
    unlock.add_argument('name')
    unlock.set_defaults(func=cmd_unlock)

    scan = subparsers.add_parser('scan', help='Show the state of every skin')
    scan.set_defaults(func=cmd_scan)

    return parser


def main(argv=None):
    """main"""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    file_config = Config.load_config(args.config_dir)

    try:
        config = Config.merge_config(file_config, vars(args))
        config['base_path'] = Config.require_base_path(config)
        skins = SkinSet(
            base_path=config['base_path'],
            store=open_store(config),
            timeout=config['timeout'],
            poll_interval=config['poll_interval']
        )
        return args.func(skins, args)
    except SkinLockError as e:
        logger.error(str(e))
        console.print(f"[bold red]{e}[/bold red]")
        return 1


if __name__ == '__main__':
    sys.exit(main())
