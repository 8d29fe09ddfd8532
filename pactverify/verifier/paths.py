import re

SIMPLE_KEY = re.compile(r'^\w+$')


def format_path(path):
    """Render a list of path elements as a pact-style JSON path, e.g. ['$', 'items', 0, 'id'] -> $.items[0].id
    """
    s = str(path[0])
    for elem in path[1:]:
        if isinstance(elem, int):
            s += f'[{elem}]'
        elif SIMPLE_KEY.match(elem) or elem == '*':
            s += '.' + elem
        else:
            s += f"['{elem}']"
    return s
