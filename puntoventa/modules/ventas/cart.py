# puntoventa/modules/ventas/cart.py
"""
Carrito de venta.

Las líneas guardan la fila del producto tal como se leyó al agregarla; el
subtotal y el total siempre se calculan a partir de cantidad × precio.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value if value is not None else 0))


@dataclass
class CartLine:
    producto: Dict[str, Any]
    cantidad: int

    @property
    def producto_id(self) -> int:
        return self.producto["id"]

    @property
    def precio_unitario(self) -> Decimal:
        return to_decimal(self.producto["precio_venta"])

    @property
    def stock(self) -> int:
        return int(self.producto.get("stock_actual") or 0)

    @property
    def subtotal(self) -> Decimal:
        return self.precio_unitario * self.cantidad


class SalesCart:
    """Líneas de venta con cantidad limitada al stock del producto"""

    def __init__(self):
        self.lines: List[CartLine] = []

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def find(self, producto_id: int) -> Optional[CartLine]:
        for line in self.lines:
            if line.producto_id == producto_id:
                return line
        return None

    def add_item(self, producto: Dict[str, Any]) -> bool:
        """
        Agregar una unidad del producto.

        Returns:
            False si el producto no tiene stock o la línea ya está en el máximo
        """
        if int(producto.get("stock_actual") or 0) <= 0:
            return False

        line = self.find(producto["id"])
        if line is None:
            self.lines.append(CartLine(producto=dict(producto), cantidad=1))
            return True
        if line.cantidad < line.stock:
            line.cantidad += 1
            return True
        return False

    def update_quantity(self, producto_id: int, cantidad: int) -> Optional[CartLine]:
        """Fijar la cantidad dentro de [1, stock]; no crea líneas"""
        line = self.find(producto_id)
        if line is None:
            return None
        line.cantidad = max(1, min(int(cantidad), line.stock))
        return line

    def remove_item(self, producto_id: int) -> None:
        self.lines = [line for line in self.lines if line.producto_id != producto_id]

    def clear(self) -> None:
        self.lines = []

    def total(self) -> Decimal:
        return sum((line.subtotal for line in self.lines), Decimal("0"))
