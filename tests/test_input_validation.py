from services.input_validation import parse_amount, parse_signed_amount


def test_parse_amount_keeps_precision_and_rejects_negatives():
    assert parse_amount("12.345") == 12.345
    assert parse_amount(0) == 0.0
    assert parse_amount(-1) is None
    assert parse_amount("abc") is None
    assert parse_amount(None) is None


def test_parse_signed_amount_accepts_any_finite_value():
    assert parse_signed_amount(-5.555) == -5.555
    assert parse_signed_amount("1e3") == 1000.0
    assert parse_signed_amount(float("nan")) is None
    assert parse_signed_amount(float("inf")) is None
    assert parse_signed_amount(True) is None
