"""
SMPP Delivery Receipt Parser

Delivery receipts arrive as deliver_sm text in the SMPP v3.4 Appendix B
format::

    id:IIIIIIIIII sub:SSS dlvrd:DDD submit date:YYMMDDhhmm done date:YYMMDDhhmm
    stat:DDDDDDD err:E text:...

Many SMSCs deviate from it (longer error codes, seconds in the dates, extra
whitespace, missing text), so a lenient pattern is tried when the strict one
does not match.
"""

import logging
import re
from datetime import datetime
from typing import Any, Dict, Optional

from ..exceptions import SMPPParseException

logger = logging.getLogger(__name__)

RECEIPT_PATTERN = re.compile(
    r'^id:(?P<id>[^ ]+) sub:(?P<sub>\d{1,3}) dlvrd:(?P<dlvrd>\d{3})'
    r' submit date:(?P<submit_date>\d{10,12}) done date:(?P<done_date>\d{10,12})'
    r' stat:(?P<stat>[A-Z ]{7}) err:(?P<err>\d{2,3}) text:(?P<text>.*)$',
    re.IGNORECASE | re.DOTALL,
)

LENIENT_RECEIPT_PATTERN = re.compile(
    r'id:(?P<id>\S+)\s+sub:(?P<sub>\d+)\s+dlvrd:(?P<dlvrd>\d+)'
    r'\s+submit date:(?P<submit_date>\d+)\s+done date:(?P<done_date>\d+)'
    r'\s+stat:(?P<stat>\w+)\s+err:(?P<err>\d+)',
    re.IGNORECASE,
)


def parse_receipt_date(value: str) -> Optional[datetime]:
    """
    Convert a receipt date (YYMMDDhhmm with optional ss) into a datetime.

    Returns None when the digits do not form a valid calendar time.
    """
    if len(value) == 10:
        value += '00'
    try:
        return datetime.strptime(value, '%y%m%d%H%M%S')
    except ValueError:
        logger.debug('Invalid receipt date %r', value)
        return None


def parse_delivery_receipt(text: str, body: bytes = b'') -> Dict[str, Any]:
    """
    Parse delivery receipt text into its fields.

    Args:
        text: Decoded short message of a deliver_sm with the receipt bit set
        body: Raw PDU body, included in the error for diagnostics

    Returns:
        Mapping with id, sub, dlvrd, submit_date, done_date, stat, err, text
        plus the derived message_id, status, error_code and final_date

    Raises:
        SMPPParseException: If neither receipt format matches
    """
    match = RECEIPT_PATTERN.match(text) or LENIENT_RECEIPT_PATTERN.search(text)
    if match is None:
        raise SMPPParseException(
            f'Could not parse delivery receipt: {text!r}\n{body.hex()}',
            text=text,
            body_hex=body.hex(),
        )

    fields = match.groupdict()
    fields.setdefault('text', '')

    fields['message_id'] = fields['id']
    fields['status'] = fields['stat']
    fields['error_code'] = fields['err']
    fields['final_date'] = parse_receipt_date(fields['done_date'])
    return fields
