"""UPI payment deep links shown to the rider as a QR code."""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union
from urllib.parse import urlencode, quote

_UPI_ID_RE = re.compile(r'^[\w.\-]{2,256}@[A-Za-z][A-Za-z0-9]{1,64}$')


def is_valid_upi_id(upi_id: str) -> bool:
    return bool(upi_id) and bool(_UPI_ID_RE.match(upi_id))


def format_amount(amount: Union[str, int, float, Decimal]) -> str:
    try:
        value = Decimal(str(amount)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"Invalid amount {amount!r}")
    if not value.is_finite() or value <= 0:
        raise ValueError(f"Amount must be positive, got {amount!r}")
    return str(value)


def build_upi_link(payee_address: str, payee_name: str,
                   amount: Union[str, int, float, Decimal],
                   note: Optional[str] = None, currency: str = 'INR') -> str:
    """
    Build a upi://pay deep link.

    >>> build_upi_link('driver@upi', 'Ravi', '100.00')
    'upi://pay?pa=driver%40upi&pn=Ravi&am=100.00&cu=INR'
    """
    if not is_valid_upi_id(payee_address):
        raise ValueError(f"Invalid UPI ID {payee_address!r}")

    params = {
        'pa': payee_address,
        'pn': payee_name,
        'am': format_amount(amount),
        'cu': currency,
    }
    if note:
        params['tn'] = note
    return 'upi://pay?' + urlencode(params, quote_via=quote)
