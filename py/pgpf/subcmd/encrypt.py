import argparse
import contextlib

import pgpf.cli as cli

meaning = """Encrypt files for one or more recipients, optionally signing them, too.
Unknown recipient keys are fetched from the keyserver unless --no-search.
Revoked or expired recipient keys are refused.
"""


def add_arguments(subparser: argparse.ArgumentParser):
    subparser.add_argument('--recipient', '-r', metavar="fingerprint", action='append', required=True,
                           help="fingerprint of a recipient's public key (repeatable)")
    subparser.add_argument('--sign-key', '-s', metavar="fingerprint", action='append', default=[],
                           help="fingerprint of a secret key to sign with (repeatable)")
    cli.add_file_arguments(subparser)
    cli.add_keyserver_arguments(subparser)
    cli.add_passphrase_arguments(subparser)
    cli.add_common_arguments(subparser)


def execute(pargs: argparse.Namespace):
    with contextlib.closing(cli.make_facade(pargs)) as gpg:
        gpg.add_encrypt_keys(cli.fingerprints(pargs.recipient), search=not pargs.no_search)
        if pargs.sign_key:
            signkeys = cli.fingerprints(pargs.sign_key)
            gpg.add_sign_keys(signkeys, cli.passphrases(pargs, signkeys))
            results = gpg.encrypt_sign_files(pargs.files, names=pargs.names)
        else:
            results = gpg.encrypt_files(pargs.files, names=pargs.names)
        cli.write_results(pargs, results)
        cli.shred_inputs(pargs, gpg)
