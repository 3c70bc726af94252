"""Best-effort secure deletion of files."""
import os
import secrets

import base as b


class FileShredder:
    def shred(self, path: str):
        """
        Overwrite the file in place with random bytes of the same length, then delete it.
        Whether the old content is really gone from the disk depends on the filesystem
        (journaling, copy-on-write, SSD wear leveling): no guarantees here.
        """
        size = os.path.getsize(path)
        with open(path, 'r+b') as f:
            f.write(secrets.token_bytes(size))
            f.flush()
            os.fsync(f.fileno())
        os.remove(path)
        b.debug(f"shredded '{path}' ({size} bytes)")
