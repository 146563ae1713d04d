from decimal import Decimal


def format_currency(amount: Decimal | float, symbol: str = "R$") -> str:
    """Format an amount in Brazilian style, e.g. 'R$ 1.234,56'."""
    text = f"{float(amount):,.2f}"
    # swap the US separators for pt-BR ones
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{symbol} {text}"


def format_days_until(days: int) -> str:
    """'hoje' for 0, otherwise 'em N dia(s)'."""
    return "hoje" if days == 0 else f"em {days} dia(s)"
