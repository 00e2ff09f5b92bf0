"""Node labels: ``%name``, ``%rank`` and ``%taxid`` expanded in a format string."""

import re

BOX_FORMAT = "%rank: %name"
COMPACT_FORMAT = "%name"

_TOKEN = re.compile(r"%(taxid|name|rank)")


def expand(format_spec: str, node) -> str:
    """
    Substitute the tokens of ``format_spec`` with the fields of ``node``.

    Anything that is not a token is copied verbatim, and substituted text is
    never expanded again (a name containing ``%rank`` stays as is).
    """
    fields = {
        "taxid": str(node.taxid),
        "name": node.name,
        "rank": node.rank,
    }
    return _TOKEN.sub(lambda match: fields[match.group(1)], format_spec)
