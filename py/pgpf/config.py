"""Represent and handle the contents of the pgpfront YAML config file."""
import os
import typing as tg

import base as b
import pgpf.constants as c
import pgpf.engine
import pgpf.facade
import pgpf.keyfinder
import pgpf.shredder


class Config:
    """
    Settings for building a GnuPG facade. Every entry is optional:
      gnupghome: keyring directory (default: gpg's own, i.e. ~/.gnupg)
      gpgbinary: gpg executable (default: 'gpg' from $PATH)
      keyserver: host name of the HKPS keyserver
      cafile: CA certificate file to trust for the keyserver (default: system trust store)
      timeout: keyserver timeout in seconds
      armor: ASCII-armored output (default: true)
      signmode: normal, detach, or clear (default: clear)
      log: DEBUG, INFO, WARNING, ERROR, or CRITICAL
    """
    gnupghome: b.OStr = None
    gpgbinary: str = 'gpg'
    keyserver: str = c.KEYSERVER_DEFAULT
    cafile: b.OStr = None
    timeout: float = c.KEYSERVER_TIMEOUT_DEFAULT
    armor: bool = True
    signmode: str = pgpf.engine.SignMode.CLEAR.value
    log: b.OStr = None
    configfile: b.OStr  # where the settings came from, None for defaults only

    def __init__(self, configfile: b.OStr = None):
        """Reads configfile, or $PGPFRONT_CONFIG, or ~/.pgpfront.yaml (only the latter may be missing)."""
        explicit = configfile or os.environ.get(c.CONFIG_ENV)
        path = os.path.expanduser(explicit or c.CONFIG_FILE_DEFAULT)
        if not explicit and not os.path.exists(path):
            self.configfile = None
            return
        if not os.path.exists(path):
            b.critical(f"config file '{path}' does not exist")
        self.configfile = path
        configdict = b.slurp_yaml(path)
        if configdict is not None and not isinstance(configdict, dict):
            b.critical(f"'{path}' must contain a YAML mapping")
        b.copyattrs(path, configdict, self,
                    mustcopy_attrs="",
                    cancopy_attrs="gnupghome, gpgbinary, keyserver, cafile, timeout, armor, signmode, log",
                    typecheck=dict(timeout=(int, float), armor=bool), report_extra=True)
        for pathattr in ('gnupghome', 'cafile'):
            value = getattr(self, pathattr)
            if value:
                setattr(self, pathattr, b.expandvars(value, path))
        if self.signmode not in tuple(pgpf.engine.SignMode):
            b.critical(f"'{path}': signmode must be one of {[m.value for m in pgpf.engine.SignMode]}, "
                       f"not '{self.signmode}'")

    def make_engine(self) -> pgpf.engine.GnupgEngine:
        return pgpf.engine.GnupgEngine(gnupghome=self.gnupghome, gpgbinary=self.gpgbinary,
                                       armor=self.armor)

    def make_keyfinder(self) -> pgpf.keyfinder.KeyFinder:
        return pgpf.keyfinder.KeyFinder(server=self.keyserver, cafile=self.cafile, timeout=self.timeout)

    def make_facade(self, engine: tg.Optional[pgpf.engine.Engine] = None) -> pgpf.facade.GnuPG:
        gpg = pgpf.facade.GnuPG(engine or self.make_engine(), self.make_keyfinder(),
                                pgpf.shredder.FileShredder())
        gpg.set_sign_mode(self.signmode)
        return gpg
