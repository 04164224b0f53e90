# puntoventa/shared/services/saga.py
"""
Secuencias de escrituras con nombre y pasos compensables.

El store de Supabase no ofrece transacciones entre tablas: una venta son
varias escrituras independientes (venta, items, stock, movimientos). Cada
secuencia se declara como una saga: pasos ordenados, cada uno registrado en
el log, con un paso de compensación opcional que deshace su efecto.

- Store sin transacciones: si un paso falla se ejecutan las compensaciones
  de los pasos ya completados, en orden inverso.
- Store con transacciones: toda la saga corre dentro de una transacción y
  el fallo la revierte completa; no se llaman compensaciones.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from puntoventa.core.exceptions import PuntoVentaError, SagaError, StoreError
from puntoventa.shared.store.base import RemoteStore

logger = logging.getLogger(__name__)

SagaContext = Dict[str, Any]


@dataclass
class SagaStep:
    name: str
    action: Callable[[SagaContext], Any]
    compensate: Optional[Callable[[SagaContext, Any], None]] = None


class Saga:
    """Ejecutor secuencial de pasos con compensación"""

    def __init__(self, name: str, store: RemoteStore):
        self.name = name
        self.store = store
        self.steps: List[SagaStep] = []

    def step(
        self,
        name: str,
        action: Callable[[SagaContext], Any],
        compensate: Optional[Callable[[SagaContext, Any], None]] = None
    ) -> "Saga":
        self.steps.append(SagaStep(name, action, compensate))
        return self

    @property
    def step_names(self) -> List[str]:
        return [s.name for s in self.steps]

    def run(self, context: Optional[SagaContext] = None) -> SagaContext:
        """
        Ejecutar los pasos en orden.

        Returns:
            Contexto con el resultado de cada paso bajo su nombre

        Raises:
            SagaError: Si un paso falla por un error del store
        """
        ctx: SagaContext = dict(context or {})
        transactional = self.store.supports_transactions

        logger.info(f"[{self.name}] Iniciando ({len(self.steps)} pasos, transaccional={transactional})")
        with self.store.transaction():
            completed: List[Tuple[SagaStep, Any]] = []
            for step in self.steps:
                try:
                    result = step.action(ctx)
                except Exception as e:
                    logger.error(f"[{self.name}] ✗ {step.name}: {e}")
                    self._fail(step, completed, ctx, e, transactional)
                ctx[step.name] = result
                completed.append((step, result))
                logger.info(f"[{self.name}] ✓ {step.name}")

        logger.info(f"[{self.name}] Completada")
        return ctx

    def _fail(
        self,
        failed: SagaStep,
        completed: List[Tuple[SagaStep, Any]],
        ctx: SagaContext,
        error: Exception,
        transactional: bool
    ) -> None:
        completed_names = [s.name for s, _ in completed]

        if transactional:
            logger.warning(f"[{self.name}] Revirtiendo transacción ({len(completed)} pasos)")
            compensated, failed_compensations = list(reversed(completed_names)), []
        else:
            compensated, failed_compensations = self._compensate(completed, ctx)

        if not isinstance(error, StoreError):
            raise error

        message = error.message if isinstance(error, PuntoVentaError) else str(error)
        raise SagaError(
            f"{self.name}: falló el paso '{failed.name}': {message}",
            failed_step=failed.name,
            completed_steps=completed_names,
            compensated_steps=compensated,
            failed_compensations=failed_compensations,
            cause=error
        ) from error

    def _compensate(
        self,
        completed: List[Tuple[SagaStep, Any]],
        ctx: SagaContext
    ) -> Tuple[List[str], List[str]]:
        compensated = []
        failed = []
        for step, result in reversed(completed):
            if step.compensate is None:
                continue
            try:
                step.compensate(ctx, result)
                compensated.append(step.name)
                logger.info(f"[{self.name}] ↺ {step.name} compensado")
            except Exception as e:
                failed.append(step.name)
                logger.error(f"[{self.name}] ✗ compensación de {step.name} falló: {e}")
        return compensated, failed
