"""
GnuPG: convenience layer over an OpenPGP Engine.

Adds what the engine does not do by itself:
- refuses revoked, expired, or unknown keys for encryption,
  fetching unknown keys from a keyserver first if allowed to,
- checks signing passphrases right away by signing a probe text,
- pairs batches of keys with passphrases and of files with output names,
- reads, names, and optionally shreds files.
Batches are processed in order and stop at the first failure;
whatever the earlier items did (registered keys, shredded files) stays done.
"""
import os
import typing as tg

import base as b
import pgpf.constants as c
import pgpf.errors as err
from pgpf.engine import Engine, ErrorMode, ImportInfo, KeyInfo, SignMode
from pgpf.keyfinder import KeyFinder
from pgpf.shredder import FileShredder

Fingerprints = str | tg.Sequence[str]
Passwords = tg.Optional[b.OStr | tg.Sequence[b.OStr]]
Files = str | tg.Sequence[str]
Names = tg.Optional[str | tg.Sequence[str]]


class GnuPG:
    engine: Engine
    keyfinder: KeyFinder
    shredder: FileShredder
    signmode: SignMode

    def __init__(self, engine: Engine, keyfinder: tg.Optional[KeyFinder] = None,
                 shredder: tg.Optional[FileShredder] = None):
        if engine.errormode != ErrorMode.EXCEPTION:
            raise err.InvalidArgument(f"engine must use error mode '{ErrorMode.EXCEPTION}', "
                                      f"not '{engine.errormode}'")
        self.engine = engine
        self.keyfinder = keyfinder or KeyFinder()
        self.shredder = shredder or FileShredder()
        self.set_sign_mode(SignMode.CLEAR)

    # ----- output format:

    def binary(self) -> 'GnuPG':
        self.engine.set_armor(False)
        return self

    def ascii(self) -> 'GnuPG':
        self.engine.set_armor(True)
        return self

    def clear_sign(self) -> 'GnuPG':
        return self.set_sign_mode(SignMode.CLEAR)

    def normal_sign(self) -> 'GnuPG':
        return self.set_sign_mode(SignMode.NORMAL)

    def detach_sign(self) -> 'GnuPG':
        return self.set_sign_mode(SignMode.DETACH)

    def set_sign_mode(self, mode: SignMode | str) -> 'GnuPG':
        try:
            mode = SignMode(mode)
        except ValueError:
            raise err.InvalidArgument(f"Invalid signing mode: [{mode}]") from None
        self.engine.set_signmode(mode)
        self.signmode = mode
        return self

    # ----- key registration:

    def add_encrypt_keys(self, fingerprints: Fingerprints, search=True) -> 'GnuPG':
        for fingerprint in b.as_list(fingerprints):
            self.validate_key(fingerprint, search)
            self.engine.add_encrypt_key(fingerprint)
            b.debug(f"encrypt key {fingerprint} added")
        return self

    def clear_encrypt_keys(self) -> 'GnuPG':
        self.engine.clear_encrypt_keys()
        return self

    def add_decrypt_keys(self, fingerprints: Fingerprints, passwords: Passwords = ()) -> 'GnuPG':
        fingerprints = b.as_list(fingerprints)
        passwords = self._normalize_key_passwords(fingerprints, passwords)
        for fingerprint, password in zip(fingerprints, passwords):
            if not self.has_secret_key(fingerprint):
                raise err.SecretKeyNotFound(fingerprint)
            self.engine.add_decrypt_key(fingerprint, password)
            b.debug(f"decrypt key {fingerprint} added")
        return self

    def clear_decrypt_keys(self) -> 'GnuPG':
        self.engine.clear_decrypt_keys()
        return self

    def add_sign_keys(self, fingerprints: Fingerprints, passwords: Passwords = ()) -> 'GnuPG':
        fingerprints = b.as_list(fingerprints)
        passwords = self._normalize_key_passwords(fingerprints, passwords)
        for fingerprint, password in zip(fingerprints, passwords):
            self._add_secret_key(fingerprint, password)
            b.debug(f"sign key {fingerprint} added")
        return self

    def clear_sign_keys(self) -> 'GnuPG':
        self.engine.clear_sign_keys()
        return self

    def clear_keys(self) -> 'GnuPG':
        self.clear_encrypt_keys()
        self.clear_decrypt_keys()
        self.clear_sign_keys()
        return self

    def close(self):
        self.keyfinder.close()

    # ----- data:

    def encrypt_data(self, data: str | bytes) -> bytes:
        return self._handle_gpg(data, encrypt=True, sign=False)

    def sign_data(self, data: str | bytes) -> bytes:
        return self._handle_gpg(data, encrypt=False, sign=True)

    def encrypt_sign_data(self, data: str | bytes) -> bytes:
        return self._handle_gpg(data, encrypt=True, sign=True)

    def decrypt_data(self, data: str | bytes) -> bytes:
        return self.engine.decrypt(_as_bytes(data))

    # ----- files:

    def encrypt_files(self, files: Files, destroy=False, names: Names = ()) -> dict[str, bytes]:
        return self._handle_files(files, destroy, names, encrypt=True, sign=False)

    def sign_files(self, files: Files, destroy=False, names: Names = ()) -> dict[str, bytes]:
        return self._handle_files(files, destroy, names, encrypt=False, sign=True)

    def encrypt_sign_files(self, files: Files, destroy=False, names: Names = ()) -> dict[str, bytes]:
        return self._handle_files(files, destroy, names, encrypt=True, sign=True)

    def decrypt_files(self, files: Files, destroy=False, names: Names = ()) -> dict[str, bytes]:
        """Like encrypt_files(), but names lose their .gpg/.pgp/.asc suffix (or get .out)."""
        processed = dict()
        for file, name in self._files_and_names(files, names):
            plaintext = self.decrypt_data(self._read_file(file))
            if destroy:
                self.shredder.shred(file)
            processed[_strip_ext(file if name is None else name)] = plaintext
        return processed

    # ----- keys:

    def import_keys_from_server(self, fingerprints: Fingerprints, server: b.OStr = None):
        for fingerprint in b.as_list(fingerprints):
            key = self.keyfinder.get(fingerprint, server)
            try:
                self.engine.import_key(key)
            except err.EngineError as ex:  # the keyserver answered, but not with a key
                raise err.PublicKeyNotFound(fingerprint, server or self.keyfinder.server) from ex
            b.info(f"imported key {fingerprint} from keyserver")

    def import_key(self, keydata: str | bytes) -> ImportInfo:
        return self.engine.import_key(keydata)

    def is_key_revoked(self, fingerprint: str, search=True) -> bool:
        return self._existing_key_info(fingerprint, search).revoked

    def is_key_expired(self, fingerprint: str, search=True) -> bool:
        return self._existing_key_info(fingerprint, search).expired

    def validate_key(self, fingerprint: str, search=True):
        """Raise RevokedKey or ExpiredKey (or PublicKeyNotFound) if fingerprint is no good."""
        if self.is_key_revoked(fingerprint, search):
            raise err.RevokedKey(fingerprint)
        if self.is_key_expired(fingerprint, search=False):  # the keyserver has just been asked
            raise err.ExpiredKey(fingerprint)

    def has_public_key(self, fingerprint: str) -> bool:
        return len(self.engine.keyinfo(fingerprint)) > 0

    def has_secret_key(self, fingerprint: str) -> bool:
        return len(self.engine.keyinfo(fingerprint, secret=True)) > 0

    def get_key_info(self, fingerprint: str, search=True) -> tg.Optional[KeyInfo]:
        self._load_key_or_fail(fingerprint, search)
        info = self.engine.keyinfo(fingerprint)
        return info[0] if info else None

    # ----- helpers:

    def _handle_gpg(self, plaintext: str | bytes, encrypt: bool, sign: bool) -> bytes:
        plaintext = _as_bytes(plaintext)
        if encrypt and sign:
            return self.engine.encrypt_sign(plaintext)
        elif encrypt:
            return self.engine.encrypt(plaintext)
        elif sign:
            return self.engine.sign(plaintext)
        raise err.InvalidArgument(f"You must either sign or encrypt: encrypting={encrypt} | signing={sign}")

    def _handle_files(self, files: Files, destroy: bool, names: Names,
                      encrypt: bool, sign: bool) -> dict[str, bytes]:
        processed = dict()
        for file, name in self._files_and_names(files, names):
            outname = self._append_ext(file if name is None else name, encrypt, sign)
            transformed = self._handle_gpg(self._read_file(file), encrypt, sign)
            if destroy:
                self.shredder.shred(file)
            processed[outname] = transformed  # same outname twice: last one wins
        return processed

    def _append_ext(self, file: str, encrypt: bool, sign: bool) -> str:
        if not encrypt and not sign:
            raise err.InvalidArgument(f"You must either sign or encrypt: encrypting={encrypt} | signing={sign}")
        basename = os.path.basename(file)
        if encrypt or self.signmode == SignMode.NORMAL:
            return basename + c.SUFFIX_ENCRYPTED
        elif self.signmode == SignMode.DETACH:
            return basename + c.SUFFIX_DETACHED
        else:
            return basename + c.SUFFIX_CLEARSIGNED

    @staticmethod
    def _files_and_names(files: Files, names: Names) -> list[tuple[str, b.OStr]]:
        files = b.as_list(files)
        names = b.as_list(names)
        if names and len(files) != len(names):
            raise err.InvalidArgument(f"Number of files and filenames must match: "
                                      f"[{len(files)}] files, [{len(names)}] names")
        return list(zip(files, names or [None] * len(files)))

    @staticmethod
    def _read_file(file: str) -> bytes:
        if not os.path.isfile(file):
            raise err.InvalidArgument(f"Could not find file [{file}].")
        return b.slurp_bytes(file)

    @staticmethod
    def _normalize_key_passwords(fingerprints: list[str], passwords: Passwords) -> list[b.OStr]:
        """One passphrase per key; none at all means an empty one for each key."""
        passwords = b.as_list(passwords)
        if passwords and len(passwords) != len(fingerprints):
            raise err.InvalidArgument(f"You provided [{len(fingerprints)}] key(s) and [{len(passwords)}] "
                                      "password(s). If you provide key passwords, "
                                      "the number of passwords and keys must match")
        return passwords or [""] * len(fingerprints)

    def _add_secret_key(self, fingerprint: str, password: b.OStr):
        try:
            self.engine.add_sign_key(fingerprint, password)
        except err.EngineError as ex:
            raise err.SecretKeyNotFound(fingerprint) from ex
        # the engine accepts a wrong passphrase here; only signing tells
        try:
            self.engine.sign(c.PROBE_SIGN_TEXT.encode('utf8'))
        except err.EngineError as ex:
            raise err.InvalidSecretKeyPassphrase(fingerprint, bool(password)) from ex

    def _existing_key_info(self, fingerprint: str, search: bool) -> KeyInfo:
        info = self.get_key_info(fingerprint, search)
        if info is None:  # the keyserver delivered some key, but not this one
            raise err.PublicKeyNotFound(fingerprint, self.keyfinder.server)
        return info

    def _load_key_or_fail(self, fingerprint: str, search=True):
        if not self.has_public_key(fingerprint):
            if not search:
                raise err.PublicKeyNotFound(fingerprint)
            self.import_keys_from_server(fingerprint)


def _as_bytes(data: str | bytes) -> bytes:
    return data.encode('utf8') if isinstance(data, str) else data


def _strip_ext(file: str) -> str:
    basename = os.path.basename(file)
    root, ext = os.path.splitext(basename)
    if ext.lower() in c.ENCRYPTED_SUFFIXES and root:
        return root
    return basename + c.DECRYPTED_SUFFIX
