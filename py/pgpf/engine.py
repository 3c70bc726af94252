"""
The OpenPGP engine the facade delegates to: the Engine contract and GnupgEngine,
its implementation on top of the python-gnupg library.

python-gnupg is stateless (each call spawns one gpg process), so GnupgEngine
itself remembers which keys are registered for which role, the armor setting
and the signing mode, and turns them into gpg arguments per call.
"""
import dataclasses
import enum
import time
import typing as tg

import gnupg

import base as b
import pgpf.errors as err


class SignMode(enum.StrEnum):
    """Output shape of a signature."""
    NORMAL = 'normal'  # signed payload embedded in the signature packet
    DETACH = 'detach'  # signature only, payload stays separate
    CLEAR = 'clear'  # readable payload within a signature wrapper


class ErrorMode(enum.StrEnum):
    """How the engine reports failed operations."""
    EXCEPTION = 'exception'  # raise EngineError
    WARNING = 'warning'  # b.warning() and return an empty result
    SILENT = 'silent'  # just return an empty result


@dataclasses.dataclass(frozen=True)
class KeyInfo:
    """Snapshot of one key as listed by the keyring. Not cached anywhere."""
    fingerprint: str
    keyid: str = ""
    uids: tuple[str, ...] = ()
    revoked: bool = False
    expired: bool = False
    disabled: bool = False
    invalid: bool = False
    can_encrypt: bool = False
    can_sign: bool = False
    secret: bool = False

    @classmethod
    def from_gnupg(cls, record: b.StrAnyDict, now: tg.Optional[float] = None) -> 'KeyInfo':
        """
        Convert one entry of gnupg.GPG.list_keys().
        'trust' is the gpg validity letter (r: revoked, e: expired, i: invalid),
        'cap' has an uppercase letter per capability usable for the key as a whole.
        """
        now = time.time() if now is None else now
        validity = record.get('trust', '')
        expires = record.get('expires', '')
        caps = record.get('cap', '')
        return cls(fingerprint=record.get('fingerprint', ''),
                   keyid=record.get('keyid', ''),
                   uids=tuple(record.get('uids', ())),
                   revoked=validity == 'r',
                   expired=validity == 'e' or bool(expires and int(expires) <= now),
                   disabled='D' in caps,
                   invalid=validity == 'i',
                   can_encrypt='E' in caps,
                   can_sign='S' in caps,
                   secret=record.get('type') == 'sec')


@dataclasses.dataclass(frozen=True)
class ImportInfo:
    count: int
    fingerprints: tuple[str, ...] = ()


class Engine:
    """
    What the GnuPG facade needs from an OpenPGP implementation.
    Failures raise err.EngineError if errormode is EXCEPTION.
    """
    errormode: ErrorMode = ErrorMode.EXCEPTION

    def set_armor(self, on: bool) -> None:
        raise NotImplementedError

    def set_signmode(self, mode: SignMode) -> None:
        raise NotImplementedError

    def add_encrypt_key(self, fingerprint: str) -> bool:
        raise NotImplementedError

    def clear_encrypt_keys(self) -> None:
        raise NotImplementedError

    def add_decrypt_key(self, fingerprint: str, passphrase: b.OStr = None) -> bool:
        raise NotImplementedError

    def clear_decrypt_keys(self) -> None:
        raise NotImplementedError

    def add_sign_key(self, fingerprint: str, passphrase: b.OStr = None) -> bool:
        raise NotImplementedError

    def clear_sign_keys(self) -> None:
        raise NotImplementedError

    def keyinfo(self, pattern: str, secret: bool = False) -> list[KeyInfo]:
        raise NotImplementedError

    def import_key(self, keydata: str | bytes) -> ImportInfo:
        raise NotImplementedError

    def encrypt(self, data: bytes) -> bytes:
        raise NotImplementedError

    def sign(self, data: bytes) -> bytes:
        raise NotImplementedError

    def encrypt_sign(self, data: bytes) -> bytes:
        raise NotImplementedError

    def decrypt(self, data: bytes) -> bytes:
        raise NotImplementedError


class GnupgEngine(Engine):
    gpg: gnupg.GPG
    armor: bool
    signmode: SignMode
    encrypt_keys: list[str]
    decrypt_keys: dict[str, b.OStr]  # fingerprint -> passphrase, in order of registration
    sign_keys: dict[str, b.OStr]  # ditto

    def __init__(self, gnupghome: b.OStr = None, gpgbinary: str = 'gpg', armor: bool = True,
                 errormode: ErrorMode = ErrorMode.EXCEPTION, gpg: tg.Optional[gnupg.GPG] = None):
        self.gpg = gpg or gnupg.GPG(gnupghome=gnupghome, gpgbinary=gpgbinary)
        self.errormode = ErrorMode(errormode)
        self.armor = armor
        self.signmode = SignMode.CLEAR
        self.encrypt_keys = []
        self.decrypt_keys = dict()
        self.sign_keys = dict()

    def set_armor(self, on: bool):
        self.armor = bool(on)

    def set_signmode(self, mode: SignMode):
        self.signmode = SignMode(mode)

    def add_encrypt_key(self, fingerprint: str) -> bool:
        if not self.keyinfo(fingerprint):
            return self._fail('addencryptkey', f"no public key {fingerprint}")
        if fingerprint not in self.encrypt_keys:
            self.encrypt_keys.append(fingerprint)
        return True

    def clear_encrypt_keys(self):
        self.encrypt_keys.clear()

    def add_decrypt_key(self, fingerprint: str, passphrase: b.OStr = None) -> bool:
        if not self.keyinfo(fingerprint, secret=True):
            return self._fail('adddecryptkey', f"no secret key {fingerprint}")
        self.decrypt_keys[fingerprint] = passphrase
        return True

    def clear_decrypt_keys(self):
        self.decrypt_keys.clear()

    def add_sign_key(self, fingerprint: str, passphrase: b.OStr = None) -> bool:
        if not self.keyinfo(fingerprint, secret=True):
            return self._fail('addsignkey', f"no secret key {fingerprint}")
        self.sign_keys.pop(fingerprint, None)  # re-adding makes it the most recent one
        self.sign_keys[fingerprint] = passphrase
        return True

    def clear_sign_keys(self):
        self.sign_keys.clear()

    def keyinfo(self, pattern: str, secret: bool = False) -> list[KeyInfo]:
        records = self.gpg.list_keys(secret=secret, keys=[pattern])
        return [KeyInfo.from_gnupg(record) for record in records]

    def import_key(self, keydata: str | bytes) -> ImportInfo:
        result = self.gpg.import_keys(keydata)
        if not result.count:
            self._fail('import', result.summary(), result.stderr)
            return ImportInfo(count=0)
        b.debug(f"gpg import: {result.summary()}")
        return ImportInfo(count=result.count, fingerprints=tuple(result.fingerprints))

    def encrypt(self, data: bytes) -> bytes:
        return self._encrypt(data, sign=False)

    def encrypt_sign(self, data: bytes) -> bytes:
        return self._encrypt(data, sign=True)

    def sign(self, data: bytes) -> bytes:
        result = self.gpg.sign(data, passphrase=self._sign_passphrase(),
                               clearsign=self.signmode == SignMode.CLEAR,
                               detach=self.signmode == SignMode.DETACH,
                               binary=not self.armor, extra_args=self._signer_args())
        return result.data if self._check(result, 'sign') else b""

    def decrypt(self, data: bytes) -> bytes:
        passphrases = list(dict.fromkeys(pw or None for pw in self.decrypt_keys.values())) or [None]
        for passphrase in passphrases:  # gpg picks the key itself; we only know the candidates
            result = self.gpg.decrypt(data, passphrase=passphrase, always_trust=True)
            if result.ok:
                return result.data
        return result.data if self._check(result, 'decrypt') else b""

    def _encrypt(self, data: bytes, sign: bool) -> bytes:
        operation = 'encryptsign' if sign else 'encrypt'
        if not self.encrypt_keys:
            return self._fail(operation, "no encryption keys registered") or b""
        kwargs = dict(sign=True, passphrase=self._sign_passphrase(),
                      extra_args=self._signer_args()) if sign else dict()
        result = self.gpg.encrypt(data, self.encrypt_keys, always_trust=True,
                                  armor=self.armor, **kwargs)
        return result.data if self._check(result, operation) else b""

    def _signer_args(self) -> list[str]:
        return [arg for fpr in self.sign_keys for arg in ('--local-user', fpr)]

    def _sign_passphrase(self) -> b.OStr:
        """The most recent sign key's passphrase; gpg-agent has cached those of earlier keys."""
        if not self.sign_keys:
            return None
        return list(self.sign_keys.values())[-1] or None

    def _check(self, result, operation: str) -> bool:
        if result:
            return True
        return self._fail(operation, getattr(result, 'status', None), getattr(result, 'stderr', ""))

    def _fail(self, operation: str, status: b.OStr, stderr: str = "") -> bool:
        problem = err.EngineError(operation, status, stderr or "")
        if self.errormode == ErrorMode.EXCEPTION:
            raise problem
        elif self.errormode == ErrorMode.WARNING:
            b.warning(str(problem))
        return False
