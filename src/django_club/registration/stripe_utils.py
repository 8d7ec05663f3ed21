"""Currency conversion for the Stripe API and key obfuscation for logging.

Stripe represents monetary amounts as integers in the smallest currency unit (e.g. cents
for USD). Most currencies are "normal-decimal" where 1 unit = 100 smallest units, but
a subset of currencies are "zero-decimal" where the integer amount *is* the unit amount.
"""

from decimal import Decimal

_OBFUSCATE_VISIBLE_CHARS = 4

ZERO_DECIMAL_CURRENCIES: frozenset[str] = frozenset(
    {
        "BIF",
        "CLP",
        "DJF",
        "GNF",
        "JPY",
        "KMF",
        "KRW",
        "MGA",
        "PYG",
        "RWF",
        "UGX",
        "VND",
        "VUV",
        "XAF",
        "XOF",
        "XPF",
    }
)


def convert_amount_for_api(amount: Decimal, currency: str) -> int:
    """Convert a Decimal amount to the integer representation expected by the Stripe API.

    ``Decimal("50.00")`` in USD becomes ``5000``.  Zero-decimal currencies such as JPY
    are returned as ``int(amount)`` because one unit already is the smallest unit.

    Args:
        amount: The monetary amount as a :class:`~decimal.Decimal`.
        currency: An ISO 4217 currency code (case-insensitive).

    Returns:
        The amount as an integer in the smallest currency unit suitable for Stripe.
    """
    if currency.upper() in ZERO_DECIMAL_CURRENCIES:
        return int(amount)
    return int(amount * 100)


def obfuscate_key(key: str) -> str:
    """Obfuscate an API key so it can be safely written to logs.

    Returns the last four characters of the key prefixed with ``"****"``.  If the key is
    shorter than four characters only ``"****"`` is returned.
    """
    if len(key) < _OBFUSCATE_VISIBLE_CHARS:
        return "****"
    return "****" + key[-_OBFUSCATE_VISIBLE_CHARS:]
