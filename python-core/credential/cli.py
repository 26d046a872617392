"""
Credential Command Line Interface

A thin text interface over CredentialEngine. It carries no security
logic of its own.

Usage:
    credential hash [PASSWORD] [-w WORK] [-k KEY_LENGTH]
    credential verify RECORD PASSWORD
    credential expired RECORD [DAYS]
    credential --version
    credential --help

A PASSWORD (for hash) or RECORD (for verify and expired) of "-" is read
from standard input. hash with no password also reads standard input.

Exit codes:
    0  hash printed, password verified, or record not expired
    1  invalid password, expired record, or any error
"""

import argparse
import logging
import sys
from typing import List, Optional, TextIO

from . import __version__
from .engine import CredentialEngine, DEFAULT_EXPIRY_DAYS
from .errors import CredentialError

STDIN_MARKER = "-"


class CredentialCLI:
    """Main CLI application for credential."""

    def __init__(
        self,
        engine: Optional[CredentialEngine] = None,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ):
        self.engine = engine or CredentialEngine()
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr

    def run(self, args: List[str]) -> int:
        """Run the CLI with given arguments."""
        parser = self.create_parser()
        parsed = parser.parse_args(args)

        logging.basicConfig(
            level=logging.DEBUG if parsed.verbose else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
            stream=self.stderr,
        )

        if hasattr(parsed, 'func'):
            try:
                return parsed.func(parsed)
            except CredentialError as e:
                print(f"Error: {e}", file=self.stderr)
                return 1
        else:
            parser.print_help(self.stdout)
            return 0

    def create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser."""
        parser = argparse.ArgumentParser(
            prog="credential",
            description="Hash and verify passwords",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
    credential hash 'correct horse battery staple'
    echo -n 'correct horse battery staple' | credential hash -
    credential verify "$(cat stored.json)" 'correct horse battery staple'
    credential expired "$(cat stored.json)" 30
            """
        )

        parser.add_argument(
            '--version',
            action='version',
            version=f'credential v{__version__}'
        )
        parser.add_argument('--verbose', '-v', action='store_true',
                            help='Log engine activity to stderr')

        subparsers = parser.add_subparsers(title='commands', dest='command')

        self.add_hash_command(subparsers)
        self.add_verify_command(subparsers)
        self.add_expired_command(subparsers)

        return parser

    def add_hash_command(self, subparsers):
        """Add hash command to parser."""
        cmd = subparsers.add_parser('hash', help='Hash password')
        cmd.add_argument('password', nargs='?', default=STDIN_MARKER,
                         help='Password to hash ("-" or omitted: read stdin)')
        cmd.add_argument('--work', '-w', type=float,
                         help='Relative work load (0.5 for half the work)')
        cmd.add_argument('--key-length', '-k', type=int, dest='key_length',
                         help='Length of salt and hash in bytes')
        cmd.set_defaults(func=self.handle_hash)

    def add_verify_command(self, subparsers):
        """Add verify command to parser."""
        cmd = subparsers.add_parser('verify', help='Verify password')
        cmd.add_argument('record', help='Stored record ("-": read stdin)')
        cmd.add_argument('password', help='Password attempt')
        cmd.set_defaults(func=self.handle_verify)

    def add_expired_command(self, subparsers):
        """Add expired command to parser."""
        cmd = subparsers.add_parser('expired', help='Check whether a record needs rehashing')
        cmd.add_argument('record', help='Stored record ("-": read stdin)')
        cmd.add_argument('days', nargs='?', type=float, default=DEFAULT_EXPIRY_DAYS,
                         help=f'Threshold age in days (default {DEFAULT_EXPIRY_DAYS})')
        cmd.set_defaults(func=self.handle_expired)

    def read_argument(self, value: str) -> str:
        """Resolve "-" to the contents of stdin."""
        if value != STDIN_MARKER:
            return value
        return self.stdin.read().rstrip("\r\n")

    # Command handlers

    def handle_hash(self, args):
        """Handle hash command."""
        engine = self.engine.configure(work=args.work, key_length=args.key_length)
        record = engine.hash(self.read_argument(args.password))
        print(engine.encode(record), file=self.stdout)
        return 0

    def handle_verify(self, args):
        """Handle verify command."""
        valid = self.engine.verify(self.read_argument(args.record), args.password)
        print("Verified" if valid else "Invalid", file=self.stdout)
        return 0 if valid else 1

    def handle_expired(self, args):
        """Handle expired command."""
        if self.engine.is_expired(self.read_argument(args.record), args.days):
            print("Expired", file=self.stderr)
            return 1
        print("Not expired", file=self.stdout)
        return 0


def main():
    """Main entry point."""
    cli = CredentialCLI()
    sys.exit(cli.run(sys.argv[1:]))


if __name__ == "__main__":
    main()
