# puntoventa/shared/database/models.py
"""
Tablas del store remoto, declaradas para el backend SQL.

En producción con Supabase el esquema vive en el servicio externo; estas
definiciones reflejan esas tablas para SqlStore (desarrollo local, tests y
despliegues sobre una base transaccional propia).
"""
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Date, Text,
    Numeric, ForeignKey, CheckConstraint
)
from sqlalchemy.orm import declarative_base
from datetime import datetime

Base = declarative_base()

# =====================================================
# MIXIN PARA TIMESTAMPS
# =====================================================
class TimestampMixin:
    """Mixin que agrega created_at"""
    created_at = Column(DateTime, nullable=False, default=datetime.now)


# =====================================================
# CATÁLOGO
# =====================================================

class Categoria(Base, TimestampMixin):
    __tablename__ = "categorias"

    id = Column(Integer, primary_key=True, index=True)
    nombre = Column(String(255), nullable=False)
    descripcion = Column(Text)


class Producto(Base, TimestampMixin):
    __tablename__ = "productos"

    id = Column(Integer, primary_key=True, index=True)
    nombre = Column(String(255), nullable=False, index=True)
    descripcion = Column(Text)
    precio_venta = Column(Numeric(12, 2), nullable=False, default=0)
    precio_costo = Column(Numeric(12, 2), nullable=False, default=0)
    stock_actual = Column(Integer, nullable=False, default=0)
    stock_minimo = Column(Integer, nullable=False, default=0)
    sku = Column(String(100))
    categoria_id = Column(Integer, ForeignKey("categorias.id"))
    imagen_url = Column(String(500))


class Ingrediente(Base, TimestampMixin):
    __tablename__ = "ingredientes"

    id = Column(Integer, primary_key=True, index=True)
    nombre = Column(String(255), nullable=False)
    unidad_medida = Column(String(20), nullable=False, default="kg")
    precio_unitario = Column(Numeric(12, 2), nullable=False, default=0)
    stock_actual = Column(Numeric(12, 3), nullable=False, default=0)
    activo = Column(Boolean, nullable=False, default=True)


class Cliente(Base, TimestampMixin):
    __tablename__ = "clientes"

    id = Column(Integer, primary_key=True, index=True)
    nombre = Column(String(255), nullable=False)
    email = Column(String(255))
    telefono = Column(String(50))
    notas_cliente = Column(Text)


# =====================================================
# VENTAS
# =====================================================

class Venta(Base, TimestampMixin):
    __tablename__ = "ventas"

    id = Column(Integer, primary_key=True, index=True)
    total = Column(Numeric(12, 2), nullable=False)
    metodo_pago = Column(String(20), nullable=False)
    usuario_id = Column(String(64))
    cliente_id = Column(Integer, ForeignKey("clientes.id"))

    __table_args__ = (
        CheckConstraint("metodo_pago IN ('efectivo', 'tarjeta')", name="ck_ventas_metodo_pago"),
    )


class VentaItem(Base):
    __tablename__ = "venta_items"

    id = Column(Integer, primary_key=True, index=True)
    venta_id = Column(Integer, ForeignKey("ventas.id"), nullable=False, index=True)
    producto_id = Column(Integer, ForeignKey("productos.id"), nullable=False)
    cantidad = Column(Integer, nullable=False)
    precio_unitario = Column(Numeric(12, 2), nullable=False)


class MovimientoInventario(Base, TimestampMixin):
    __tablename__ = "movimientos_inventario"

    id = Column(Integer, primary_key=True, index=True)
    producto_id = Column(Integer, ForeignKey("productos.id", ondelete="CASCADE"), nullable=False, index=True)
    tipo_movimiento = Column(String(30), nullable=False)
    cantidad = Column(Integer, nullable=False)
    justificacion = Column(Text)
    usuario_id = Column(String(64))


# =====================================================
# COTIZACIONES
# =====================================================

class Cotizacion(Base, TimestampMixin):
    __tablename__ = "cotizaciones"

    id = Column(Integer, primary_key=True, index=True)
    tipo = Column(String(20), nullable=False, default="personalizada")
    cliente_id = Column(Integer, ForeignKey("clientes.id"))
    total = Column(Numeric(12, 2), nullable=False)
    valida_hasta = Column(Date)
    estado = Column(String(20), nullable=False, default="pendiente")
    nombre_producto = Column(String(255))
    usuario_id = Column(String(64))


class CotizacionItem(Base):
    __tablename__ = "cotizacion_items"

    id = Column(Integer, primary_key=True, index=True)
    cotizacion_id = Column(Integer, ForeignKey("cotizaciones.id"), nullable=False, index=True)
    producto_id = Column(Integer, ForeignKey("productos.id"), nullable=False)
    cantidad = Column(Integer, nullable=False)
    precio_unitario = Column(Numeric(12, 2), nullable=False)


class CotizacionIngrediente(Base):
    __tablename__ = "cotizacion_ingredientes"

    id = Column(Integer, primary_key=True, index=True)
    cotizacion_id = Column(Integer, ForeignKey("cotizaciones.id"), nullable=False, index=True)
    ingrediente_id = Column(Integer, ForeignKey("ingredientes.id"), nullable=False)
    cantidad = Column(Numeric(12, 3), nullable=False)
    precio_unitario = Column(Numeric(12, 2), nullable=False)
    notas = Column(Text)


# =====================================================
# METAS
# =====================================================

class Meta(Base, TimestampMixin):
    """Meta mensual de ventas (mes = primer día del mes)"""
    __tablename__ = "metas"

    id = Column(Integer, primary_key=True, index=True)
    mes = Column(Date, nullable=False, unique=True)
    monto_objetivo = Column(Numeric(12, 2), nullable=False)
