from __future__ import annotations

import os


MAX_AMOUNT = float(os.getenv("PROJECTION_MAX_AMOUNT", "1000000000000"))


def parse_amount(value) -> float | None:
    """Valor monetário não negativo (ativos, dívidas).

    O valor segue sem arredondamento para a simulação.
    """
    amount = parse_signed_amount(value)
    if amount is None or amount < 0:
        return None
    return amount


def parse_signed_amount(value) -> float | None:
    # Receita, despesa e poupança mensal aceitam qualquer valor finito
    if isinstance(value, bool):
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    if amount != amount:  # NaN
        return None
    if abs(amount) > MAX_AMOUNT:
        return None
    return amount
