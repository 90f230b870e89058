"""
Title cleaning and tokenization for store searches.

Spotify titles carry a lot of noise that store search engines choke on:
"Song (feat. X) - 2011 Remaster", "Song [Live at Y]", "Song - Radio Edit".
clean_track_title() strips it before a query is built; normalize_tokens()
splits text into the lowercase tokens the scorer compares against URLs.
"""

import re


# Applied in this order; each rule works on the output of the previous one
_BRACKETED = re.compile(r"[\(\[][^)\]]*[\)\]]")
_DASH_SUFFIX = re.compile(r"\s-\s.*$")
_YEAR = re.compile(r"\b(20[0-9]{2}|19[0-9]{2})\b")
_VERSION_SUFFIX = re.compile(
    r"\b(remaster(ed)?|remix|live|mono|stereo|edit|version|deluxe|spatial|atmos)\b.*$",
    re.IGNORECASE
)

_APOSTROPHES = re.compile(r"[‘’']")
_NON_TOKEN = re.compile(r"[^a-z0-9\s-]")


def clean_track_title(raw: str) -> str:
    """
    Strip version noise from a track title.

    Rules, in order:
        1. Drop (parenthesized) and [bracketed] segments
        2. Cut at the first " - "
        3. Drop years 1900-2099
        4. Cut at the first remaster/remix/live/mono/stereo/edit/version/
           deluxe/spatial/atmos word
        5. Collapse whitespace

    Rule 2 runs once, before years are dropped, so a year glued to a dash
    ("Song 2019- Other") leaves a " - " behind. Cleaning the result again
    cuts it further; callers clean raw titles exactly once.

    Examples:
        clean_track_title("Song (Live) - 2019 Remaster")  # "Song"
        clean_track_title("Other Song [Mono]")            # "Other Song"
    """
    title = _BRACKETED.sub(" ", raw)
    title = _DASH_SUFFIX.sub(" ", title)
    title = _YEAR.sub(" ", title)
    title = _VERSION_SUFFIX.sub(" ", title)
    return " ".join(title.split())


def normalize_tokens(text: str) -> list[str]:
    """
    Split text into lowercase comparison tokens.

    Apostrophes are removed outright ("don't" -> "dont"), anything else
    outside a-z, 0-9, whitespace and hyphen becomes a separator.

    Example:
        normalize_tokens("Guns N' Roses")  # ["guns", "n", "roses"]
    """
    text = _APOSTROPHES.sub("", text.lower())
    text = _NON_TOKEN.sub(" ", text)
    return text.split()
