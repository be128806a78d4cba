import logging
import os

import attr
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from .utils import AuthenticationError

log = logging.getLogger(__name__)

MAGIC = b'ENVC1'
SALT_LENGTH = 16
NONCE_LENGTH = 12
KEY_LENGTH = 32


@attr.s(frozen=True)
class Cipher:
    """
    Password based authenticated encryption.

    Artifacts are laid out as MAGIC | salt | nonce | ciphertext, where the
    ciphertext carries the GCM tag and the magic is authenticated as
    associated data.
    """

    n: int = attr.ib(default=2 ** 14)
    r: int = attr.ib(default=8)
    p: int = attr.ib(default=1)

    def derive(self, password: str, salt: bytes) -> bytes:
        kdf = Scrypt(salt=salt, length=KEY_LENGTH, n=self.n, r=self.r, p=self.p)
        return kdf.derive(password.encode('utf-8'))

    def encrypt(self, plaintext: bytes, password: str) -> bytes:
        salt = os.urandom(SALT_LENGTH)
        nonce = os.urandom(NONCE_LENGTH)
        aes = AESGCM(self.derive(password, salt))
        log.debug(f"Encrypting {len(plaintext)} bytes")
        return MAGIC + salt + nonce + aes.encrypt(nonce, plaintext, MAGIC)

    def decrypt(self, ciphertext: bytes, password: str) -> bytes:
        header = len(MAGIC) + SALT_LENGTH + NONCE_LENGTH

        if not ciphertext.startswith(MAGIC) or len(ciphertext) <= header:
            raise AuthenticationError("Encrypted file is not in a format envcoder can read")

        salt = ciphertext[len(MAGIC):len(MAGIC) + SALT_LENGTH]
        nonce = ciphertext[len(MAGIC) + SALT_LENGTH:header]
        aes = AESGCM(self.derive(password, salt))

        log.debug(f"Decrypting {len(ciphertext)} bytes")
        try:
            return aes.decrypt(nonce, ciphertext[header:], MAGIC)
        except InvalidTag:
            raise AuthenticationError(
                "Could not decrypt: the password is wrong or the file has been modified")
