"""
Username, slug and avatar derivation.
"""

from __future__ import annotations

import random
import re
import secrets
import string
from typing import Protocol

URL_SAFE_ALPHABET = string.ascii_letters + string.digits + "_-"
ALPHANUMERIC = string.ascii_letters + string.digits

USERNAME_SUFFIX_LENGTH = 5
SLUG_TOKEN_LENGTH = 21

PROFILE_IMG_NAMES = (
    "Garfield", "Tinkerbell", "Annie", "Loki", "Cleo", "Angel", "Bob", "Mia",
    "Coco", "Gracie", "Bear", "Bella", "Abby", "Harley", "Cali", "Leo",
    "Luna", "Jack", "Felix", "Kiki",
)
PROFILE_IMG_STYLES = ("notionists-neutral", "adventurer-neutral", "fun-emoji")


class UsernameLookup(Protocol):
    def username_exists(self, username: str) -> bool:
        ...


def random_token(size: int = SLUG_TOKEN_LENGTH, alphabet: str = URL_SAFE_ALPHABET) -> str:
    return "".join(secrets.choice(alphabet) for _ in range(size))


def derive_username(email: str, directory: UsernameLookup) -> str:
    """
    Use the local part of ``email``; if it is taken, append a short random
    suffix. A second collision is left for the unique index to reject.
    """
    username = email.split("@")[0]
    if directory.username_exists(username):
        username += random_token(USERNAME_SUFFIX_LENGTH, ALPHANUMERIC)
    return username


def derive_blog_slug(title: str) -> str:
    base = re.sub(r"[^a-zA-Z0-9]", " ", title).strip()
    base = re.sub(r"\s+", "-", base)
    token = random_token()
    return f"{base}-{token}" if base else token


def default_profile_img() -> str:
    name = random.choice(PROFILE_IMG_NAMES)
    style = random.choice(PROFILE_IMG_STYLES)
    return f"https://api.dicebear.com/6.x/{style}/svg?seed={name}"
