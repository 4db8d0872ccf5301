from typing import Any


def clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_label(value: Any) -> str:
    # "a1v1 " y "A1V1" son la misma etiqueta
    return clean(value).upper()
