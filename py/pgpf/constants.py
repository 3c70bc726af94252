CONFIG_ENV = "PGPFRONT_CONFIG"  # path of the YAML config file
CONFIG_FILE_DEFAULT = "~/.pgpfront.yaml"
DECRYPTED_SUFFIX = ".out"  # for decrypted files whose name has no known suffix
ENCRYPTED_SUFFIXES = (".gpg", ".pgp", ".asc")  # stripped from names of decrypted files
KEYSERVER_DEFAULT = "hkps.pool.sks-keyservers.net"
KEYSERVER_LOOKUP_URL = "https://{server}/pks/lookup?op=get&search=0x{fingerprint}"
KEYSERVER_TIMEOUT_DEFAULT = 20  # seconds
OUTDIR_DEFAULT = "."
PROBE_SIGN_TEXT = "test"  # signed once per added sign key to check its passphrase
SUFFIX_ENCRYPTED = ".gpg"  # also for normal signatures
SUFFIX_DETACHED = ".sig"
SUFFIX_CLEARSIGNED = ".asc"
TEST_FINGERPRINTS_ENV = "PGPFRONT_TEST_FINGERPRINTS"  # enables tests against the real keyring
