"""
Object key helpers.

Keys never start with a slash. Upload paths lowercase file names, so
objects uploaded elsewhere with mixed-case names are found again through
case_variants(), a best-effort guess rather than a case-insensitive index.
"""

import re

# Only image names get the title-case guess
IMAGE_EXTENSIONS = frozenset({".jpg", ".png", ".gif"})

_WORD_START = re.compile(r"(^|[/\-_])([a-z])")


def strip_leading_slash(value: str) -> str:
    return value.lstrip("/")


def strip_trailing_slash(value: str) -> str:
    return value.rstrip("/")


def join_key(*parts: str) -> str:
    """Join path parts into an object key, dropping empty parts."""
    segments = [part.strip("/") for part in parts if part and part.strip("/")]
    return "/".join(segments)


def title_case_words(value: str) -> str:
    """Uppercase the first letter after each path separator, hyphen or underscore."""
    return _WORD_START.sub(lambda m: m.group(1) + m.group(2).upper(), value)


def case_variants(key: str) -> list[str]:
    """
    Candidate keys for an object whose exact key was not found.

    Order matters, first match wins:
    1. the key unchanged
    2. title-cased file name, extension as given
    3. title-cased file name, extension uppercased

    Directory segments are left alone since the path prefix and date
    directories are written by us and never change case.
    """
    variants = [key]

    directory, _, name = key.rpartition("/")
    stem, dot, ext = name.rpartition(".")
    if dot and stem and f".{ext.lower()}" in IMAGE_EXTENSIONS:
        titled = title_case_words(stem)
        for candidate_ext in (ext, ext.upper()):
            variants.append(join_key(directory, f"{titled}.{candidate_ext}"))

    # dict preserves insertion order
    return list(dict.fromkeys(variants))
