import argparse
import contextlib

import pgpf.cli as cli
from pgpf.engine import SignMode

meaning = """Sign files: clearsigned (*.asc), detached signature (*.sig), or normal (*.gpg)."""


def add_arguments(subparser: argparse.ArgumentParser):
    subparser.add_argument('--sign-key', '-s', metavar="fingerprint", action='append', required=True,
                           help="fingerprint of a secret key to sign with (repeatable)")
    subparser.add_argument('--mode', default=None, choices=[m.value for m in SignMode],
                           help="kind of signature (default: from config file, else clear)")
    cli.add_file_arguments(subparser)
    cli.add_passphrase_arguments(subparser)
    cli.add_common_arguments(subparser)


def execute(pargs: argparse.Namespace):
    with contextlib.closing(cli.make_facade(pargs)) as gpg:
        if pargs.mode:
            gpg.set_sign_mode(pargs.mode)
        signkeys = cli.fingerprints(pargs.sign_key)
        gpg.add_sign_keys(signkeys, cli.passphrases(pargs, signkeys))
        results = gpg.sign_files(pargs.files, names=pargs.names)
        cli.write_results(pargs, results)
        cli.shred_inputs(pargs, gpg)
