import os

import argparse_subcommand as ap_sub


class PgpfrontArgParser(ap_sub.ArgumentParser):
    """One-trick pony class for obtaining the version-bearing description only when needed."""

    def format_help(self):
        self.description = f"pgpfront {self.get_version()}: Encrypt, sign, and decrypt files with GnuPG."
        return super().format_help()

    @staticmethod
    def get_version() -> str:
        import tomllib
        # the development tree has this structure:
        #   pyproject.toml
        #   py/pgpf/argparser.py
        # an installed package may or may not have pyproject.toml next to pgpf/.
        topdir = os.path.dirname(os.path.dirname(__file__))
        pyprojectfile = os.path.join(topdir, "pyproject.toml")
        if not os.path.exists(pyprojectfile):  # development tree: go from py to top
            pyprojectfile = os.path.join(os.path.dirname(topdir), "pyproject.toml")
        if not os.path.exists(pyprojectfile):
            return "(unknown version)"
        with open(pyprojectfile, 'rb') as f:
            toml = tomllib.load(f)
            return toml['tool']['poetry']['version']
