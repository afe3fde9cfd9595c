"""
PyDVBScan Command Line Interface

Usage:
    python -m dvbscan params <string> [--source S]     # Canonical parameter string
    python -m dvbscan list <channels.conf>             # Channel table
    python -m dvbscan transponders <channels.conf>     # Transponder summary
    python -m dvbscan check-if -f 11727 -p H           # Satellite IF check
    python -m dvbscan normalize <channels.conf> -o out # Rewrite channel lines

Examples:
    # Parse a hand written parameter string, write it for DVB-S
    python -m dvbscan params vc23m5o35s1 --source S

    # List channels, checking satellite IFs against a diseqc.conf
    python -m dvbscan list /var/lib/vdr/channels.conf --diseqc /var/lib/vdr/diseqc.conf

    # Is 10714 H reachable with a universal LNB?
    python -m dvbscan check-if -f 10714 -p H --source S19.2E
"""

import argparse
import math
import sys
from pathlib import Path

from . import __version__, SOURCE_TYPES, SOURCE_NAMES, LNB_SLOF, LNB_FREQ_LO, LNB_FREQ_HI
from .logconf import setup_logging, LOG_TARGETS, DEFAULT_VERBOSITY


def _lnb_setup(args: argparse.Namespace):
    from .SatIF import LnbSetup

    kwargs = dict(slof=args.slof, lnb_lo=args.lnb_lo, lnb_hi=args.lnb_hi)
    if args.diseqc:
        return LnbSetup.load_diseqc(args.diseqc, **kwargs)
    return LnbSetup(**kwargs)


def _check_file(path: Path) -> bool:
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return False
    return True


def cmd_params(args: argparse.Namespace) -> int:
    """Parse a parameter string and print it in canonical form."""
    from .Params import TransponderParams, TAGS

    params = TransponderParams.from_string(args.params)
    print(params.to_string(args.source))

    if args.fields:
        print()
        print(f"  {'system':<14} {SOURCE_NAMES[args.source]}")
        print(f"  {'polarization':<14} {params.polarization or '-'}")
        for name in TAGS.values():
            value = getattr(params, name)
            print(f"  {name:<14} {'-' if value is None else value}")

    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """Show the channels of a channels.conf as a table."""
    from rich.console import Console
    from rich.table import Table

    from .ChannelsConf import read_entries, number_channels
    from .SatIF import intermediate_frequencies, tunable_mask

    path = Path(args.file)
    if not _check_file(path):
        return 1

    try:
        entries = read_entries(path, strict=False)
        setup = _lnb_setup(args)
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    numbered = number_channels(entries)
    sat = [ch for _, ch in numbered if ch.is_satellite]
    ifs = dict(zip(map(id, sat), intermediate_frequencies(sat, setup)))
    ok = dict(zip(map(id, sat), tunable_mask(sat, setup)))

    table = Table(title=str(path))
    table.add_column("Nr", justify="right")
    table.add_column("Name")
    table.add_column("Provider")
    table.add_column("Source")
    table.add_column("Transponder")
    table.add_column("SID", justify="right")
    table.add_column("IF", justify="right")

    for number, ch in numbered:
        if_text = ""
        if ch.is_satellite:
            f = ifs[id(ch)]
            if math.isnan(f):
                if_text = "[red]no diseqc[/red]"
            elif ok[id(ch)]:
                if_text = f"{f:.0f}"
            else:
                if_text = f"[red]{f:.0f}[/red]"
        table.add_row(str(number), ch.name, ch.provider, ch.source,
                      ch.print_transponder(), str(ch.sid), if_text)

    Console().print(table)
    print(f"{len(numbered)} channels, {len(sat)} on satellite")
    return 0


def cmd_transponders(args: argparse.Namespace) -> int:
    """Print each transponder of a channels.conf once."""
    from .ChannelsConf import read_channels

    path = Path(args.file)
    if not _check_file(path):
        return 1

    try:
        channels = read_channels(path, strict=False)
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    seen = {}
    for ch in channels:
        key = (ch.source, ch.print_transponder())
        seen[key] = seen.get(key, 0) + 1

    for (source, transponder), count in seen.items():
        print(f"{source:<8} {transponder:<48} {count:4d} channels")

    return 0


def cmd_check_if(args: argparse.Namespace) -> int:
    """Check a satellite transponder against the LNB setup."""
    from .Channel import Channel
    from .SatIF import valid_sat_if, intermediate_frequency

    if not args.source.startswith('S'):
        print(f"Error: not a satellite source: {args.source}", file=sys.stderr)
        return 1

    try:
        setup = _lnb_setup(args)
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    channel = Channel(source=args.source, frequency=args.frequency)
    channel.params.polarization = args.polarization.upper()

    f = intermediate_frequency(channel, setup)
    ok = valid_sat_if(channel, setup)

    print(f"Transponder: {channel.print_transponder()}")
    print(f"IF: {'-' if f is None else f'{f} MHz'}")
    print("tunable" if ok else "NOT tunable")

    return 0 if ok else 1


def cmd_normalize(args: argparse.Namespace) -> int:
    """Rewrite a channels.conf with canonical channel lines."""
    from .ChannelsConf import read_entries, write_channels, write_entries

    path = Path(args.file)
    if not _check_file(path):
        return 1

    try:
        entries = read_entries(path, strict=not args.skip_invalid)
        if args.output:
            count = write_channels(args.output, entries)
            print(f"Wrote: {args.output} ({count} channels)")
        else:
            sys.stdout.flush()
            write_entries(sys.stdout.buffer, entries)
            sys.stdout.buffer.flush()
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


def _add_lnb_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--diseqc', help='diseqc.conf (enables DiSEqC)')
    parser.add_argument('--slof', type=int, default=LNB_SLOF,
                        help=f'LNB switch frequency in MHz (default: {LNB_SLOF})')
    parser.add_argument('--lnb-lo', type=int, default=LNB_FREQ_LO,
                        help=f'Low band LOF in MHz (default: {LNB_FREQ_LO})')
    parser.add_argument('--lnb-hi', type=int, default=LNB_FREQ_HI,
                        help=f'High band LOF in MHz (default: {LNB_FREQ_HI})')


def main(argv=None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog='dvbscan',
        description='PyDVBScan - DVB transponder parameter codec',
    )
    parser.add_argument('--version', action='version',
                        version=f'PyDVBScan {__version__}')
    parser.add_argument('-v', '--verbosity', type=int, default=DEFAULT_VERBOSITY,
                        choices=range(7), metavar='0-6',
                        help=f'Log verbosity 0-6 (default: {DEFAULT_VERBOSITY})')
    parser.add_argument('--log', choices=LOG_TARGETS, default='stderr',
                        help='Log target (default: stderr)')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Params command
    params_parser = subparsers.add_parser('params', help='Parse a parameter string')
    params_parser.add_argument('params', help='Parameter string, e.g. VC23M5O35S1')
    params_parser.add_argument('-s', '--source', choices=sorted(SOURCE_TYPES), default='S',
                               help='Delivery system (default: S)')
    params_parser.add_argument('--fields', action='store_true',
                               help='Also show the parsed fields')

    # List command
    list_parser = subparsers.add_parser('list', help='Show channels.conf as table')
    list_parser.add_argument('file', help='channels.conf')
    _add_lnb_arguments(list_parser)

    # Transponders command
    tp_parser = subparsers.add_parser('transponders', help='List transponders')
    tp_parser.add_argument('file', help='channels.conf')

    # Check IF command
    check_parser = subparsers.add_parser('check-if', help='Check satellite IF range')
    check_parser.add_argument('-f', '--frequency', type=int, required=True,
                              help='Transponder frequency (MHz, kHz or Hz)')
    check_parser.add_argument('-p', '--polarization', choices=list('HVLRhvlr'),
                              required=True, help='Polarization')
    check_parser.add_argument('--source', default='S19.2E',
                              help='Satellite source (default: S19.2E)')
    _add_lnb_arguments(check_parser)

    # Normalize command
    norm_parser = subparsers.add_parser('normalize', help='Rewrite channel lines')
    norm_parser.add_argument('file', help='channels.conf')
    norm_parser.add_argument('-o', '--output', help='Output file (default: stdout)')
    norm_parser.add_argument('--skip-invalid', action='store_true',
                             help='Drop malformed lines instead of failing')

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    setup_logging(args.verbosity, args.log)

    commands = {
        'params': cmd_params,
        'list': cmd_list,
        'transponders': cmd_transponders,
        'check-if': cmd_check_if,
        'normalize': cmd_normalize,
    }

    return commands[args.command](args)


if __name__ == '__main__':
    sys.exit(main())
