"""
Generate a local development RSA key pair for JWT signing/verification.

Writes ``dev.private.pem`` and ``dev.public.pem`` next to this script (or
into ``--output-dir``).  Point the API at them with::

    export JWT_PRIVATE_KEY_PATH=keys/dev.private.pem
    export JWT_PUBLIC_KEY_PATH=keys/dev.public.pem
"""

from __future__ import annotations

import argparse
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

KEYS_DIR = Path(__file__).resolve().parent
PRIVATE_KEY_NAME = "dev.private.pem"
PUBLIC_KEY_NAME = "dev.public.pem"


def generate_key_pair(key_size: int = 2048) -> tuple[bytes, bytes]:
    """Return a fresh ``(private_pem, public_pem)`` pair."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem, public_pem


def write_key_pair(directory: Path, *, force: bool = False) -> tuple[Path, Path] | None:
    """
    Write the key pair into *directory*.

    Returns the two paths, or ``None`` when both files already exist and
    *force* is not set.

    Raises:
        SystemExit: Only one of the two files exists.
    """
    private_path = directory / PRIVATE_KEY_NAME
    public_path = directory / PUBLIC_KEY_NAME

    if not force:
        if private_path.exists() and public_path.exists():
            return None
        if private_path.exists() != public_path.exists():
            raise SystemExit(
                "Only one key file exists. Remove both key files or pass --force."
            )

    directory.mkdir(parents=True, exist_ok=True)
    private_pem, public_pem = generate_key_pair()
    private_path.write_bytes(private_pem)
    public_path.write_bytes(public_pem)
    return private_path, public_path


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--output-dir", type=Path, default=KEYS_DIR)
    parser.add_argument("--force", action="store_true", help="overwrite existing keys")
    args = parser.parse_args(argv)

    paths = write_key_pair(args.output_dir, force=args.force)
    if paths is None:
        print(f"Keys already exist in {args.output_dir}, skipping")
        return 0
    for path in paths:
        print(f"Generated: {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
