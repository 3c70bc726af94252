"""Pieces shared by the subcommand modules in pgpf.subcmd."""
import argparse
import getpass
import os
import typing as tg

import base as b
import pgpf.config
import pgpf.constants as c
import pgpf.facade


def add_common_arguments(subparser: argparse.ArgumentParser):
    subparser.add_argument('--config', metavar="configfile", default=None,
                           help=f"YAML config file (default: ${c.CONFIG_ENV} or {c.CONFIG_FILE_DEFAULT})")
    subparser.add_argument('--log', default=None, choices=b.loglevels.keys(),
                           help="Log level for logging to stdout (default: from config file, else ERROR)")


def add_keyserver_arguments(subparser: argparse.ArgumentParser):
    subparser.add_argument('--keyserver', metavar="host", default=None,
                           help="keyserver to fetch unknown keys from (default: from config file, "
                                f"else {c.KEYSERVER_DEFAULT})")
    subparser.add_argument('--no-search', action='store_true',
                           help="fail for unknown keys instead of fetching them from the keyserver")


def add_passphrase_arguments(subparser: argparse.ArgumentParser):
    subparser.add_argument('--ask-passphrase', action='store_true',
                           help="prompt for the passphrase of each secret key")


def add_file_arguments(subparser: argparse.ArgumentParser):
    subparser.add_argument('files', nargs='+', metavar="file",
                           help="input files")
    subparser.add_argument('--names', nargs='+', metavar="name", default=[],
                           help="base names for the output files, one per input file (default: input names)")
    subparser.add_argument('--outdir', metavar="dir", default=c.OUTDIR_DEFAULT,
                           help=f"where to write the output files (default: {c.OUTDIR_DEFAULT})")
    subparser.add_argument('--binary', action='store_true',
                           help="write binary OpenPGP output instead of ASCII armor")
    subparser.add_argument('--force', action='store_true',
                           help="overwrite existing output files")
    subparser.add_argument('--destroy', action='store_true',
                           help="shred the input files after the output files have been written")
    subparser.add_argument('--yes', action='store_true',
                           help="do not ask before shredding")


def make_facade(pargs: argparse.Namespace) -> pgpf.facade.GnuPG:
    config = pgpf.config.Config(pargs.config)
    b.set_loglevel(pargs.log or config.log or "ERROR")
    if getattr(pargs, 'keyserver', None):
        config.keyserver = pargs.keyserver
    if getattr(pargs, 'binary', False):
        config.armor = False
    b.debug(f"config: {config.configfile or '(defaults)'}")
    return config.make_facade()


def passphrases(pargs: argparse.Namespace, fingerprints: tg.Sequence[str]) -> list[str]:
    """One passphrase per key if --ask-passphrase, else none at all."""
    if not pargs.ask_passphrase:
        return []
    return [getpass.getpass(f"Passphrase for {fpr}: ") for fpr in fingerprints]


def fingerprints(raw: tg.Optional[tg.Sequence[str]]) -> list[str]:
    return [b.as_fingerprint(fpr) for fpr in raw or []]


def write_results(pargs: argparse.Namespace, results: dict[str, bytes]):
    targets = {name: os.path.join(pargs.outdir, name) for name in results}
    if not pargs.force:
        existing = [path for path in targets.values() if os.path.exists(path)]
        if existing:
            b.critical(f"output files exist already (use --force to overwrite): {existing}")
    os.makedirs(pargs.outdir, exist_ok=True)
    for name, path in targets.items():
        b.spit_bytes(path, results[name])
        b.info(f"wrote '{path}'")


def shred_inputs(pargs: argparse.Namespace, gpg: pgpf.facade.GnuPG):
    """Shred input files as requested, only after write_results() has succeeded."""
    if not pargs.destroy:
        return
    files = pargs.files if pargs.yes else [f for f in b.yesses("Shred '%s'?", pargs.files) if f]
    for file in files:
        gpg.shredder.shred(file)
        b.info(f"shredded '{file}'")
