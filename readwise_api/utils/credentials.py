"""Helpers for handling the Readwise access token.

The token is stored base64-encoded in a file readable only by its owner.
This is obfuscation, not encryption; a keyring backend could replace it.
"""

import base64
import binascii
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

VISIBLE_CHARS = 4
MIN_TOKEN_LENGTH_FOR_PARTIAL_MASK = 8


def encode_token(token: str) -> str:
    """Base64-encode a token. Empty input gives empty output."""
    if not token:
        return ""
    return base64.b64encode(token.encode()).decode()


def decode_token(encoded_token: str) -> str:
    """Decode a base64 token.

    Returns:
        str: The decoded token, or an empty string if the input is not valid base64
    """
    if not encoded_token:
        return ""
    try:
        return base64.b64decode(encoded_token.encode(), validate=True).decode()
    except (binascii.Error, UnicodeDecodeError) as e:
        logger.error("Error decoding stored token: %s", e)
        return ""


def save_token_to_file(token: str, file_path: Path) -> bool:
    """Write an encoded token to ``file_path``.

    Args:
        token: The access token
        file_path: Destination file; parent directories are created

    Returns:
        bool: True if the token was written, False otherwise
    """
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(encode_token(token))

        # Owner read/write only
        if os.name == "posix":
            os.chmod(file_path, 0o600)

        logger.debug("Token saved to %s", file_path)
        return True
    except OSError as e:
        logger.error("Error saving token to %s: %s", file_path, e)
        return False


def load_token_from_file(file_path: Path) -> str:
    """Read and decode a token file.

    Returns:
        str: The token, or an empty string if the file is missing, empty or unreadable
    """
    if not file_path.exists():
        logger.debug("Token file not found: %s", file_path)
        return ""

    try:
        encoded_token = file_path.read_text().strip()
    except OSError as e:
        logger.error("Error reading token file %s: %s", file_path, e)
        return ""

    return decode_token(encoded_token)


def mask_token(token: str) -> str:
    """Mask a token for logs and reprs, keeping the first and last four characters."""
    if not token:
        return ""

    if len(token) <= MIN_TOKEN_LENGTH_FOR_PARTIAL_MASK:
        return "*" * len(token)

    return token[:VISIBLE_CHARS] + "*" * (len(token) - 2 * VISIBLE_CHARS) + token[-VISIBLE_CHARS:]
