"""Fetch ASCII-armored public keys from an HKPS keyserver."""
import typing as tg

import requests

import base as b
import pgpf.constants as c
import pgpf.errors as err


class KeyFinder:
    """
    Resolves fingerprints to armored key text via the keyserver's /pks/lookup API.
    cafile, if given, is the only trust anchor for the keyserver's TLS certificate;
    otherwise the system trust store is used.
    """
    server: str
    cafile: b.OStr
    timeout: float
    session: requests.Session

    def __init__(self, server: b.OStr = None, cafile: b.OStr = None,
                 timeout: float = c.KEYSERVER_TIMEOUT_DEFAULT):
        self.server = server or c.KEYSERVER_DEFAULT
        self.cafile = cafile
        self.timeout = timeout
        self.session = requests.Session()

    def get(self, fingerprint: str, server: b.OStr = None) -> str:
        server = server or self.server
        url = self.fetch_url(fingerprint, server)
        b.debug(f"KeyFinder: GET {url}")
        try:
            response = self.session.get(url, timeout=self.timeout, verify=self.verify)
        except requests.RequestException as ex:
            b.warning(f"keyserver '{server}' not reachable: {ex}")
            raise err.PublicKeyNotFound(fingerprint, server) from ex
        if response.status_code != 200 or not response.text:
            b.debug(f"KeyFinder: {response.status_code}, {len(response.text or '')} chars")
            raise err.PublicKeyNotFound(fingerprint, server)
        return response.text

    def close(self):
        self.session.close()

    @property
    def verify(self) -> tg.Union[bool, str]:
        return self.cafile or True

    @staticmethod
    def fetch_url(fingerprint: str, server: b.OStr = None) -> str:
        return c.KEYSERVER_LOOKUP_URL.format(server=server or c.KEYSERVER_DEFAULT,
                                             fingerprint=fingerprint)
