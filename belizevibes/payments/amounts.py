from decimal import Decimal, ROUND_HALF_UP

# Devises sans subdivision (Stripe: montant transmis tel quel)
ZERO_DECIMAL_CURRENCIES = frozenset({
    "bif", "clp", "djf", "gnf", "jpy", "kmf", "krw", "mga",
    "pyg", "rwf", "ugx", "vnd", "vuv", "xaf", "xof", "xpf",
})

def to_minor_units(amount, currency: str = "usd") -> int:
    """
    Montant décimal -> plus petite unité de la devise (entier attendu par Stripe).
    - usd/eur: x100 (200.00 -> 20000), arrondi au plus proche (demi vers le haut)
    - devises sans décimale (jpy, ...): x1
    """
    value = Decimal(str(amount))
    factor = 1 if (currency or "").lower() in ZERO_DECIMAL_CURRENCIES else 100
    return int((value * factor).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
