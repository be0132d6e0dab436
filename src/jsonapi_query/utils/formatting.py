import typing


def english_enumerate(items: typing.Iterable[str], conj: str = ", and ") -> str:
    buf = []

    i = iter(items)
    try:
        x = next(i)
    except StopIteration:
        return ""
    buf.append(x)

    lx: typing.Optional[str] = None

    for x in i:
        if lx is not None:
            buf.append(", ")
            buf.append(lx)
        lx = x
    if lx is not None:
        buf.append(conj)
        buf.append(lx)
    return "".join(buf)


def split_csv(value: str) -> typing.List[str]:
    """
    Splits a comma separated parameter value, stripping surrounding whitespace
    of each item and dropping empty items.
    """
    return [item.strip() for item in value.split(",") if item.strip()]
