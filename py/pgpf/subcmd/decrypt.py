import argparse
import contextlib

import pgpf.cli as cli

meaning = """Decrypt files. Output names drop the .gpg/.pgp/.asc suffix (or get .out appended)."""


def add_arguments(subparser: argparse.ArgumentParser):
    subparser.add_argument('--key', '-k', metavar="fingerprint", action='append', default=[],
                           help="fingerprint of a secret key to decrypt with (repeatable; "
                                "default: whatever gpg finds)")
    cli.add_file_arguments(subparser)
    cli.add_passphrase_arguments(subparser)
    cli.add_common_arguments(subparser)


def execute(pargs: argparse.Namespace):
    with contextlib.closing(cli.make_facade(pargs)) as gpg:
        if pargs.key:
            keys = cli.fingerprints(pargs.key)
            gpg.add_decrypt_keys(keys, cli.passphrases(pargs, keys))
        results = gpg.decrypt_files(pargs.files, names=pargs.names)
        cli.write_results(pargs, results)
        cli.shred_inputs(pargs, gpg)
