from datetime import UTC, datetime

# Maior inteiro aceito em LIMIT/OFFSET e chaves INTEGER
MAX_INT = 2**31 - 1


def utc_now() -> datetime:
    """Retorna a data e hora atual em UTC."""
    return datetime.now(UTC)


def coerce_int(value: str | int | None, default: int | None = None) -> int | None:
    """
    Converte um valor de query string para inteiro.

    Valores ausentes, nao numericos ou fora de +-MAX_INT retornam o default.
    """
    if value is None:
        return default
    if isinstance(value, int):
        parsed = value
    else:
        try:
            parsed = int(str(value).strip())
        except ValueError:
            try:
                # Aceita "2.0" como 2, assim como Number() no cliente web
                as_float = float(str(value).strip())
            except ValueError:
                return default
            if as_float != as_float or abs(as_float) > MAX_INT:
                return default
            parsed = int(as_float)
    if abs(parsed) > MAX_INT:
        return default
    return parsed


def round_average(value: float | None) -> float:
    """Arredonda uma media para 2 casas, tratando ausencia como 0."""
    return round(float(value or 0), 2)
