"""
Envcoder keeps an encrypted copy of a .env file alongside the plaintext.

The plaintext .env is encrypted to .env.enc with a password, using
AES-256-GCM and a scrypt derived key. The encrypted file can be committed
and shared; the plaintext should be excluded by .gitignore.

The password is read from --password, $ENVCODER_PASSWORD, or an
ENV_PASSWORD line in the plaintext .env (which is never encrypted), and
is prompted for otherwise.

Encrypt the plaintext .env:

\b
    $ envcoder encrypt

Decrypt .env.enc into .env, settling differences with a policy:

\b
    $ envcoder decrypt --resolve merge

The policies (also set with $ENVCODER_RESOLVE) are:

\b
    * overwrite: the encrypted file wins, local-only variables are dropped.
    * ignore: the local file wins, encrypted-only variables are dropped.
    * merge: keep variables from both, local values win on conflict.
    * prompt: ask about each difference.

Show local variables that differ from the encrypted file:

\b
    $ envcoder compare
"""

__version__ = '1.0.0'
