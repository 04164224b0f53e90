# puntoventa/modules/historial/periods.py
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

from dateutil.relativedelta import relativedelta

from puntoventa.core.exceptions import ValidationError

PERIODOS = ("hoy", "semana", "mes", "año", "personalizado")


def period_range(
    periodo: str,
    now: Optional[datetime] = None,
    fecha_inicio: Optional[date] = None,
    fecha_fin: Optional[date] = None
) -> Tuple[datetime, datetime]:
    """
    Rango [inicio, fin] de created_at para el filtro de periodo.

    hoy es el día calendario completo; semana, mes y año cuentan hacia atrás
    desde ahora; personalizado incluye el día final completo.
    """
    now = now or datetime.now()

    if periodo == "hoy":
        return datetime.combine(now.date(), time.min), datetime.combine(now.date(), time.max)
    if periodo == "semana":
        return now - timedelta(days=7), now
    if periodo == "mes":
        return now - relativedelta(months=1), now
    if periodo == "año":
        return now - relativedelta(years=1), now
    if periodo == "personalizado":
        if not fecha_inicio or not fecha_fin:
            raise ValidationError("El periodo personalizado requiere fecha de inicio y fecha de fin")
        if fecha_fin < fecha_inicio:
            raise ValidationError("La fecha de fin no puede ser anterior a la de inicio")
        return datetime.combine(fecha_inicio, time.min), datetime.combine(fecha_fin, time(23, 59, 59))

    raise ValidationError(f"Periodo inválido: {periodo}. Use: {', '.join(PERIODOS)}")
