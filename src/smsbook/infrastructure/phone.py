"""Phone number canonicalization to E.164 for storage, deduplication, and display."""

import phonenumbers

from smsbook.domain import InvalidPhoneNumber, PhoneNumber

DEFAULT_REGION = "US"


def canonicalize(raw: str, default_region: str | None = DEFAULT_REGION) -> PhoneNumber:
    """Parse raw into a PhoneNumber, or raise InvalidPhoneNumber.

    Use default_region when the input has no leading + (e.g. "202 555 1234"
    with default_region "US"). If the number already includes a country code,
    default_region is ignored. Numbers only need a plausible length for their
    region, so reserved ranges such as 555 are accepted.
    """
    if not raw or not str(raw).strip():
        raise InvalidPhoneNumber(raw or "")
    raw = str(raw).strip()
    try:
        parsed = phonenumbers.parse(raw, default_region)
    except phonenumbers.NumberParseException:
        raise InvalidPhoneNumber(raw) from None
    if not phonenumbers.is_possible_number(parsed):
        raise InvalidPhoneNumber(raw)
    return PhoneNumber(
        e164=phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164),
        area_code=_area_code(parsed),
    )


def make_canonicalizer(default_region: str | None = DEFAULT_REGION):
    """Return a one-argument canonicalize bound to default_region."""

    def _canonicalize(raw: str) -> PhoneNumber:
        return canonicalize(raw, default_region=default_region)

    return _canonicalize


def _area_code(parsed: phonenumbers.PhoneNumber) -> str:
    national = phonenumbers.national_significant_number(parsed)
    # NANP: the first three national digits are always the area code.
    if parsed.country_code == 1:
        return national[:3]
    length = phonenumbers.length_of_geographical_area_code(parsed)
    if not length:
        length = phonenumbers.length_of_national_destination_code(parsed)
    return national[:length] if length else national[:3]
