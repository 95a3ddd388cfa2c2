"""Trusted official domains for scoped evidence search.

Authorities group the domains an official-source search is restricted to.
An evidence item is tagged official when its host equals one of the
requested domains or is a sub-domain of it.
"""

from typing import Dict, List

OFFICIAL_DOMAINS: Dict[str, List[str]] = {
    "mumbai": [
        "mu.ac.in",
        "mum.digitaluniversity.ac",
        "mkuniversity.ac.in",
    ],
    "ugc": [
        "ugc.ac.in",
        "education.gov.in",
        "aicte-india.org",
    ],
    "general": [
        "mu.ac.in",
        "ugc.ac.in",
        "education.gov.in",
        "aicte-india.org",
        "mum.digitaluniversity.ac",
    ],
}

DEFAULT_AUTHORITY = "general"

# Shown in the "no official info" reply
PRIMARY_OFFICIAL_SITE = "MU website"


def domains_for(authority: str) -> List[str]:
    """Return the trusted domain list for an authority, falling back to general."""
    return list(OFFICIAL_DOMAINS.get(authority, OFFICIAL_DOMAINS[DEFAULT_AUTHORITY]))
