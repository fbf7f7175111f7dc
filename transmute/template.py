"""%-style template expansion with a pluggable name lookup."""

from typing import Callable, Optional, Tuple

Mapping = Callable[[str], Optional[str]]


def _scan_name(s: str) -> Tuple[str, int]:
    """Return (name, width consumed) for the text after a ``%``.

    An empty name with a non-zero width is invalid syntax to be dropped.
    """
    if s[0] == "[":
        end = s.find("]", 1)
        if end == -1:
            return "", 1  # eat "%["
        if end == 1:
            return "", 2  # eat "%[]"
        return s[1:end], end + 1
    return s[0], 1


def fmt_expand(template: str, mapping: Mapping) -> str:
    """
    Replace ``%x`` and ``%[name]`` in ``template`` using ``mapping``.

    ``%%`` yields a literal ``%``. If ``mapping`` returns None the reference
    is left in place untouched.
    """
    out = []
    i = 0
    j = 0
    n = len(template)
    while j < n:
        if template[j] == "%" and j + 1 < n:
            out.append(template[i:j])
            rest = template[j + 1 :]
            if rest[0] == "%":
                out.append("%")
                width = 1
            else:
                name, width = _scan_name(rest)
                if name:
                    value = mapping(name)
                    out.append(value if value is not None else template[j : j + 1 + width])
            j += width
            i = j + 1
        j += 1
    out.append(template[i:])
    return "".join(out)
