"""UTF-16LE encoding helpers used for strings on the wire."""

import struct

_HIGH_FIRST, _HIGH_LAST = 0xD800, 0xDBFF
_LOW_FIRST, _LOW_LAST = 0xDC00, 0xDFFF
_REPLACEMENT = "\ufffd"


def utf16le_encode(text: str) -> bytes:
    """Encode text as UTF-16LE bytes."""
    return text.encode("utf-16-le", "surrogatepass")


def _decode_units(units) -> str:
    chars = []
    iterator = iter(units)
    for unit in iterator:
        if _HIGH_FIRST <= unit <= _HIGH_LAST:
            low = next(iterator, None)
            if low is None:
                break
            if _LOW_FIRST <= low <= _LOW_LAST:
                chars.append(chr(0x10000 + (((unit - _HIGH_FIRST) << 10) | (low - _LOW_FIRST))))
            else:
                # The unit after a bad high surrogate is consumed with it.
                chars.append(_REPLACEMENT)
        elif _LOW_FIRST <= unit <= _LOW_LAST:
            chars.append(_REPLACEMENT)
        else:
            chars.append(chr(unit))
    return "".join(chars)


def utf16le_decode(data: bytes) -> str:
    """Decode UTF-16LE bytes leniently.

    A trailing odd byte and a high surrogate at the very end are dropped;
    broken surrogate pairs become U+FFFD.
    """
    data = bytes(data)
    even = len(data) - (len(data) % 2)
    data = data[:even]
    try:
        return data.decode("utf-16-le")
    except UnicodeDecodeError:
        units = struct.unpack(f"<{even // 2}H", data)
        return _decode_units(units)


def utf16le_byte_length(text: str) -> int:
    """Return the number of bytes text occupies in UTF-16LE."""
    return sum(4 if ord(char) > 0xFFFF else 2 for char in text)