#!/usr/bin/env python3
import sys

import base as b
import pgpf.argparser
import pgpf.errors as err
import pgpf.subcmd  # this is where the subcommands will be found


def main():  # uses sys.argv
    """Calls subcommand given on command line"""
    parser = pgpf.argparser.PgpfrontArgParser(description="-")  # description is set lazily
    parser.add_argument("--version", action="version", version=f"pgpfront {parser.get_version()}")
    parser.scan("pgpf.subcmd.*")
    args = parser.parse_args()
    b.suppress_msg_duplicates()
    try:
        parser.execute_subcommand(args)
        b.finalmessage()
    except err.PgpError as ex:
        b.rich_print(str(ex), "bold red", count=1)
        sys.exit(1)
    except b.CritialError:
        sys.exit(1)  # b.critical has already printed a message


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass  # quit silently
