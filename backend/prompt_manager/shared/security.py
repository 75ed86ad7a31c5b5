import re

# Regex para remover caracteres de controle ASCII (preserva \t, \n e \r)
_CONTROL_CHARS_RE = re.compile(r'[\x00-\x08\x0b-\x0c\x0e-\x1f\x7f]')

# Cor hexadecimal no formato #RRGGBB
HEX_COLOR_RE = re.compile(r'^#[0-9A-Fa-f]{6}$')


def sanitize_text(value: str) -> str:
    """
    Sanitiza um texto removendo caracteres de controle e trim.
    """
    if value is None:
        return value
    cleaned = _CONTROL_CHARS_RE.sub('', value)
    return cleaned.strip()


def sanitize_string_list(values: list[str] | None) -> list[str] | None:
    """Sanitiza uma lista de strings."""
    if values is None:
        return None
    return [sanitize_text(v) for v in values if v is not None]


def validate_hex_color(value: str | None) -> str | None:
    """Valida que a cor esta no formato #RRGGBB."""
    if value is None:
        return value
    if not HEX_COLOR_RE.match(value):
        raise ValueError('A cor deve ser um codigo hexadecimal valido (ex: #1890ff)')
    return value
