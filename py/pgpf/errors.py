"""Exceptions raised by the GnuPG facade, its engine, and the keyserver lookup."""
import typing as tg


class PgpError(Exception):
    """Common superclass; catch this to handle any failure of pgpfront."""
    pass


class InvalidArgument(PgpError, ValueError):
    pass


class EngineError(PgpError):
    """The OpenPGP engine reported a failed operation."""
    def __init__(self, operation: str, status: tg.Optional[str] = None, stderr: str = ""):
        self.operation = operation
        self.status = status
        self.stderr = stderr
        message = f"GnuPG {operation} failed"
        if status:
            message += f": {status}"
        super().__init__(message)


class PublicKeyNotFound(PgpError):
    def __init__(self, fingerprint: str, server: tg.Optional[str] = None):
        self.fingerprint = fingerprint
        self.server = server
        message = f"Could not find a public OpenPGP key with fingerprint [{fingerprint}]"
        if server:
            message += f" (searched [{server}] for key)"
        super().__init__(message)


class SecretKeyNotFound(PgpError):
    def __init__(self, fingerprint: str):
        self.fingerprint = fingerprint
        super().__init__(f"Could not find secret OpenPGP key with fingerprint [{fingerprint}]")


class InvalidSecretKeyPassphrase(PgpError):
    def __init__(self, fingerprint: str, password: bool = False):
        self.fingerprint = fingerprint
        self.password = password  # whether a non-empty passphrase was used
        super().__init__(f"Invalid passphrase for secret key [{fingerprint}] "
                         f"(used passphrase: {'YES' if password else 'NO'})")


class RevokedKey(PgpError):
    def __init__(self, fingerprint: str):
        self.fingerprint = fingerprint
        super().__init__(f"OpenPGP key with fingerprint [{fingerprint}] is REVOKED!")


class ExpiredKey(PgpError):
    def __init__(self, fingerprint: str):
        self.fingerprint = fingerprint
        super().__init__(f"OpenPGP key with fingerprint [{fingerprint}] is expired")
