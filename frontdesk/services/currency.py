CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "THB": "฿",
}

def get_currency_symbol(currency_code: str) -> str:
    """Returns the currency symbol for a given currency code."""
    return CURRENCY_SYMBOLS.get(currency_code.upper(), "")


def format_money(amount, currency_code: str) -> str:
    """Render an amount the way the front desk shows it, e.g. ₹1,250.00."""
    value = float(amount or 0)
    symbol = get_currency_symbol(currency_code) or f"{currency_code.upper()} "
    return f"{symbol}{value:,.2f}"
