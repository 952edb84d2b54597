"""Usage hook: only Query.oldQuery is still queried by clients."""

USED = {("Query", "oldQuery")}


def check_usage(coordinates):
    return [(c["type"], c["field"]) in USED for c in coordinates]
