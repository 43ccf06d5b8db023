import re
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


_word_boundary_re = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|[-_\s]+")


def _words(name: str) -> typing.List[str]:
    return [w for w in _word_boundary_re.split(name) if w]


def camelize(name: str) -> str:
    """
    ``first_name`` -> ``firstName``
    """
    words = _words(name)
    if not words:
        return name
    return words[0].lower() + "".join(w[:1].upper() + w[1:].lower() for w in words[1:])


def dasherize(name: str) -> str:
    """
    ``firstName`` -> ``first-name``
    """
    return "-".join(w.lower() for w in _words(name)) or name


def underscore(name: str) -> str:
    """
    ``firstName`` -> ``first_name``
    """
    return "_".join(w.lower() for w in _words(name)) or name
