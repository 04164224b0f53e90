# puntoventa/modules/cotizaciones/cart.py
"""
Carrito de cotización: líneas de producto, líneas de ingrediente y una
cabecera que depende del tipo de cotización.

- personalizada: cliente + fecha de validez, acepta productos e ingredientes
- estandar: nombre del producto cotizado, solo ingredientes
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Union

from puntoventa.core.exceptions import ValidationError
from puntoventa.modules.ventas.cart import to_decimal

MIN_INGREDIENT_QUANTITY = Decimal("0.1")
INGREDIENT_QUANTITY_STEP = Decimal("0.001")


@dataclass
class PersonalizadaHeader:
    cliente_id: Optional[int] = None
    valida_hasta: Optional[date] = None
    tipo: str = field(default="personalizada", init=False)

    accepts_products = True

    def missing_fields(self) -> List[str]:
        missing = []
        if not self.cliente_id:
            missing.append("cliente_id")
        if not self.valida_hasta:
            missing.append("valida_hasta")
        return missing


@dataclass
class EstandarHeader:
    nombre_producto: str = ""
    tipo: str = field(default="estandar", init=False)

    accepts_products = False

    def missing_fields(self) -> List[str]:
        return [] if (self.nombre_producto or "").strip() else ["nombre_producto"]


QuotationHeader = Union[PersonalizadaHeader, EstandarHeader]

HEADER_TYPES = {
    "personalizada": PersonalizadaHeader,
    "estandar": EstandarHeader,
}


@dataclass
class ProductLine:
    producto: Dict[str, Any]
    cantidad: int

    @property
    def producto_id(self) -> int:
        return self.producto["id"]

    @property
    def precio_unitario(self) -> Decimal:
        return to_decimal(self.producto["precio_venta"])

    @property
    def subtotal(self) -> Decimal:
        return self.precio_unitario * self.cantidad


@dataclass
class IngredientLine:
    ingrediente: Dict[str, Any]
    cantidad: Decimal
    notas: str = ""

    @property
    def ingrediente_id(self) -> int:
        return self.ingrediente["id"]

    @property
    def precio_unitario(self) -> Decimal:
        return to_decimal(self.ingrediente["precio_unitario"])

    @property
    def subtotal(self) -> Decimal:
        return self.precio_unitario * self.cantidad


class QuotationCart:
    """Líneas y cabecera del formulario de cotización"""

    def __init__(self, tipo: str = "personalizada"):
        self.header: QuotationHeader = HEADER_TYPES[tipo]()
        self.products: List[ProductLine] = []
        self.ingredients: List[IngredientLine] = []

    @property
    def tipo(self) -> str:
        return self.header.tipo

    @property
    def is_empty(self) -> bool:
        return not self.products and not self.ingredients

    # ---- cabecera ----

    def set_tipo(self, tipo: str) -> None:
        """Cambiar de variante; pasar a estandar descarta las líneas de producto"""
        if tipo not in HEADER_TYPES:
            raise ValidationError(f"Tipo de cotización inválido: {tipo}")
        if tipo == self.tipo:
            return
        self.header = HEADER_TYPES[tipo]()
        if not self.header.accepts_products:
            self.products = []

    def update_header(self, **values: Any) -> None:
        for name, value in values.items():
            if name == "tipo" or not hasattr(self.header, name):
                raise ValidationError(f"Campo '{name}' no aplica a cotizaciones {self.tipo}")
            setattr(self.header, name, value)

    # ---- productos ----

    def find_product(self, producto_id: int) -> Optional[ProductLine]:
        return next((l for l in self.products if l.producto_id == producto_id), None)

    def add_product(self, producto: Dict[str, Any]) -> ProductLine:
        if not self.header.accepts_products:
            raise ValidationError("Las cotizaciones estándar solo admiten ingredientes")
        line = self.find_product(producto["id"])
        if line is None:
            line = ProductLine(producto=dict(producto), cantidad=1)
            self.products.append(line)
        else:
            line.cantidad += 1
        return line

    def update_product_quantity(self, producto_id: int, cantidad: int) -> Optional[ProductLine]:
        line = self.find_product(producto_id)
        if line is not None:
            line.cantidad = max(1, int(cantidad))
        return line

    def remove_product(self, producto_id: int) -> None:
        self.products = [l for l in self.products if l.producto_id != producto_id]

    # ---- ingredientes ----

    def find_ingredient(self, ingrediente_id: int) -> Optional[IngredientLine]:
        return next((l for l in self.ingredients if l.ingrediente_id == ingrediente_id), None)

    def add_ingredient(self, ingrediente: Dict[str, Any]) -> IngredientLine:
        line = self.find_ingredient(ingrediente["id"])
        if line is None:
            line = IngredientLine(ingrediente=dict(ingrediente), cantidad=Decimal("1"))
            self.ingredients.append(line)
        else:
            line.cantidad += 1
        return line

    def update_ingredient_quantity(self, ingrediente_id: int, cantidad: Any) -> Optional[IngredientLine]:
        line = self.find_ingredient(ingrediente_id)
        if line is not None:
            cantidad = to_decimal(cantidad).quantize(INGREDIENT_QUANTITY_STEP, rounding=ROUND_HALF_UP)
            line.cantidad = max(MIN_INGREDIENT_QUANTITY, cantidad)
        return line

    def update_ingredient_notes(self, ingrediente_id: int, notas: str) -> Optional[IngredientLine]:
        line = self.find_ingredient(ingrediente_id)
        if line is not None:
            line.notas = notas or ""
        return line

    def remove_ingredient(self, ingrediente_id: int) -> None:
        self.ingredients = [l for l in self.ingredients if l.ingrediente_id != ingrediente_id]

    # ---- totales ----

    def products_total(self) -> Decimal:
        return sum((l.subtotal for l in self.products), Decimal("0"))

    def ingredients_total(self) -> Decimal:
        return sum((l.subtotal for l in self.ingredients), Decimal("0"))

    def total(self) -> Decimal:
        return self.products_total() + self.ingredients_total()

    def validate(self) -> None:
        """Comprobar que la cotización puede guardarse, sin consultar el store"""
        missing = self.header.missing_fields()
        if missing:
            raise ValidationError(
                "Faltan datos de la cotización: " + ", ".join(missing),
                details={"tipo": self.tipo, "missing": missing}
            )
        if self.tipo == "estandar" and not self.ingredients:
            raise ValidationError("Agregue al menos un ingrediente a la cotización")
        if self.is_empty:
            raise ValidationError("Agregue al menos un producto o ingrediente a la cotización")

    def clear(self) -> None:
        self.header = HEADER_TYPES[self.tipo]()
        self.products = []
        self.ingredients = []
