def to_int(value: object) -> int | None:
    """Coerce a PGN header or row value to an integer.

    Floats truncate toward zero. Text must be an optionally signed run of
    digits once whitespace is stripped; placeholders such as ``?`` give None.
    """

    if isinstance(value, bool | int | float):
        return int(value)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text.lstrip("+-").isdigit():
        return None
    return int(text)
