"""
Knowledge base documents shared by the tests.
"""

JPMORGAN_KB = {
    "variants": {"jpmorgan chase": "JPMorgan Chase & Co."},
    "allKnownVariants": ["jpmorgan chase"],
}

ACME_KB = {
    "variants": {"acme": "Acme Corporation"},
    "allKnownVariants": ["acme"],
}
