"""
judgment/coercion.py — zawężanie (downcast) i poszerzanie (upcast) wartości.

Wartości mogą dostarczyć własne zachowanie przez metody:
  __downcast__(self, variant) -> wartość | None
  __upcast__(self, target)    -> wartość | NotImplemented

Domyślnie: zawężenie do typu = isinstance; poszerzenie = tożsamość, gdy
wartość już jest instancją typu docelowego.
"""

from __future__ import annotations

from typing import Any


def downcast(value: Any, variant: type | None) -> Any | None:
    """Próbuje zawęzić value do wariantu; zwraca wartość albo None."""
    if variant is None or variant is object:
        return value
    hook = getattr(value, "__downcast__", None)
    if hook is not None:
        narrowed = hook(variant)
        if narrowed is not None:
            return narrowed
    # bool jest podklasą int, True nie jest liczbą
    if isinstance(value, bool) and variant is not bool:
        return None
    if isinstance(value, variant):
        return value
    return None


def upcast(value: Any, target: type | None) -> Any:
    """
    Poszerza value do wspólnej reprezentacji target.

    Raises:
        TypeError gdy wartości nie da się przedstawić jako target.
    """
    if target is None or target is object or isinstance(value, target):
        return value
    hook = getattr(value, "__upcast__", None)
    if hook is not None:
        widened = hook(target)
        if widened is not NotImplemented:
            return widened
    raise TypeError(
        f"Nie można poszerzyć wartości {value!r} ({type(value).__name__}) do {target.__name__}"
    )
