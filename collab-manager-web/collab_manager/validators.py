"""Form field validators.

Each returns the message to show under the field, or None when the value is fine.
"""
from __future__ import annotations

import re
from typing import Optional

EMAIL_RE = re.compile(r"^[\w\-.]+@([\w-]+\.)+[\w-]{2,4}$")
STRONG_PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")

SOCIAL_DOMAINS = (
    "instagram.com", "facebook.com", "twitter.com", "linkedin.com",
    "youtube.com", "tiktok.com", "pinterest.com", "snapchat.com",
    "github.com", "behance.net", "dribbble.com",
)

TICKET_MIN_LENGTH = 10
TICKET_MAX_LENGTH = 500


def email(value: Optional[str]) -> Optional[str]:
    if not value or not value.strip():
        return "Please enter your email"
    if not EMAIL_RE.match(value.strip()):
        return "Please enter a valid email address"
    return None


def password(value: Optional[str]) -> Optional[str]:
    if not value:
        return "Please enter your password"
    if len(value) < 6:
        return "Password must be at least 6 characters long"
    return None


def strong_password(value: Optional[str]) -> Optional[str]:
    """Rules for passwords chosen by an admin for a new client account."""
    if not value:
        return "Please enter a password"
    if len(value) < 8:
        return "Password must be at least 8 characters"
    if not STRONG_PASSWORD_RE.match(value):
        return "Password must contain uppercase, lowercase, and numbers"
    return None


def required(value: Optional[str], field_name: str) -> Optional[str]:
    if value is None or not str(value).strip():
        return f"Please enter {field_name}"
    return None


def min_length(value: Optional[str], length: int, message: str) -> Optional[str]:
    if value is None or len(value.strip()) < length:
        return message
    return None


def full_name(value: Optional[str]) -> Optional[str]:
    if not value or not value.strip():
        return "Please enter the client's full name"
    return min_length(value, 2, "Full name must be at least 2 characters")


def url(value: Optional[str], required: bool = False) -> Optional[str]:
    """Lenient URL check: http(s)://, www., a known social domain, or anything dotted."""
    if not value or not value.strip():
        return "Please enter a URL" if required else None
    candidate = value.strip().lower()
    if any(domain in candidate for domain in SOCIAL_DOMAINS):
        return None
    if candidate.startswith(("http://", "https://", "www.")):
        return None
    if "." in candidate and len(candidate) > 3:
        return None
    return "Please enter a valid URL"


def social_url(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    if len(value.strip()) < 3:
        return "URL too short"
    return None


def ticket_message(value: Optional[str]) -> Optional[str]:
    if not value or not value.strip():
        return "Please describe your request"
    if len(value.strip()) < TICKET_MIN_LENGTH:
        return "Please provide more details (minimum 10 characters)"
    if len(value.strip()) > TICKET_MAX_LENGTH:
        return f"Please keep your request under {TICKET_MAX_LENGTH} characters"
    return None
