import re

_UNSAFE_CHARS = re.compile(r'[^A-Za-z0-9_]')
_LEADING_DIGIT = re.compile(r'^([0-9])')


def sanitize_identifier(name):
    """Rewrite an arbitrary name into a safe lowercase SQL identifier"""
    if name is None:
        return ''
    cleaned = _UNSAFE_CHARS.sub('_', str(name).strip())
    return _LEADING_DIGIT.sub(r'_\1', cleaned).lower()


def qualify_identifier(name, table=None):
    """Sanitize a possibly dotted column reference (table.column)"""
    name = '' if name is None else str(name)

    if '.' in name:
        table, name = name.split('.', 1)
    elif not table:
        return '*' if name.strip() == '*' else sanitize_identifier(name)

    column = '*' if name.strip() == '*' else sanitize_identifier(name)
    return f"{sanitize_identifier(table)}.{column}"
