import argparse
import contextlib

import rich
import rich.markup

import base as b
import pgpf.cli as cli
import pgpf.errors as err
import pgpf.facade

meaning = """Inspect and import public keys.
  info fingerprint...   show validity of keys (fetching unknown ones unless --no-search)
  import file...        import ASCII-armored key files into the keyring
  fetch fingerprint...  import keys from the keyserver
"""


def add_arguments(subparser: argparse.ArgumentParser):
    subparser.add_argument('action', choices=OPS.keys(),
                           help="what to do")
    subparser.add_argument('args', nargs='+', metavar="fingerprint_or_file",
                           help="fingerprints (info, fetch) or key files (import)")
    cli.add_keyserver_arguments(subparser)
    cli.add_common_arguments(subparser)


def execute(pargs: argparse.Namespace):
    with contextlib.closing(cli.make_facade(pargs)) as gpg:
        OPS[pargs.action](gpg, pargs)


def op_info(gpg: pgpf.facade.GnuPG, pargs: argparse.Namespace):
    table = b.Table()
    for column in ("fingerprint", "user IDs", "revoked", "expired", "secret key"):
        table.add_column(column)
    for fpr in cli.fingerprints(pargs.args):
        try:
            info = gpg.get_key_info(fpr, search=not pargs.no_search)
        except err.PublicKeyNotFound as ex:
            b.error(str(ex))
            continue
        if info is None:
            b.error(f"keyserver did not deliver key {fpr}")
            continue
        table.add_row(info.fingerprint, rich.markup.escape("\n".join(info.uids)),
                      _yesno(info.revoked), _yesno(info.expired), _yesno(gpg.has_secret_key(fpr)))
    rich.print(table)


def op_import(gpg: pgpf.facade.GnuPG, pargs: argparse.Namespace):
    for keyfile in pargs.args:
        result = gpg.import_key(b.slurp(keyfile))
        b.info(f"'{keyfile}': {result.count} key{b.plural_s(result.count)} imported: "
               f"{', '.join(result.fingerprints)}")


def op_fetch(gpg: pgpf.facade.GnuPG, pargs: argparse.Namespace):
    gpg.import_keys_from_server(cli.fingerprints(pargs.args), server=pargs.keyserver)


def _yesno(flag: bool) -> str:
    return "[red]yes[/red]" if flag else "no"


OPS = {"info": op_info, "import": op_import, "fetch": op_fetch}
