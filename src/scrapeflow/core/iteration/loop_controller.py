# src/scrapeflow/core/iteration/loop_controller.py
"""
Controlador de iteração limitada e cadenciada.

Usado dentro do corpo de um Step para percorrer uma lista de itens
(páginas, URLs, registros) com espera fixa entre ticks, teto de
segurança fora de produção e captura de falhas por item.

Contrato:
    - índices `start..bound` (inclusivo) são visitados em ordem crescente
    - antes de cada tick o controlador espera `delay` segundos
    - falha de um item é capturada como LoopFailure; o loop continua
    - ao final: `set_current_index(0)` e `done(items)` exatamente uma vez
    - `stop()` cancela imediatamente: nenhum tick adicional, `done` não é chamado

Decisões arquiteturais:
    - Loop sequencial espera → processa (sem callbacks de timer): ticks
      nunca se sobrepõem, mesmo quando `process` demora mais que `delay`
    - A espera é interrompível (`threading.Event.wait`), então `stop()`
      pode vir de um callback ou de outra thread
    - Retomada no lugar: se `get_current_index()` > 0, a iteração começa
      nesse índice e o índice final não muda
    - Sucesso persiste `index + 1` (a próxima posição a processar)
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITEMS = 10

_UNITS = (
    ("day", 86400),
    ("hour", 3600),
    ("minute", 60),
)


def format_duration(seconds: float, largest: int = 2) -> str:
    """Duração legível com no máximo `largest` unidades (ex.: "1 minute, 5 seconds")."""
    remaining = max(0.0, float(seconds))
    parts: List[str] = []
    for name, size in _UNITS:
        count = int(remaining // size)
        if count:
            parts.append(f"{count} {name}{'' if count == 1 else 's'}")
            remaining -= count * size
    secs = round(remaining, 2)
    if secs or not parts:
        value = int(secs) if secs == int(secs) else secs
        parts.append(f"{value} second{'' if value == 1 else 's'}")
    return ", ".join(parts[:largest])


@dataclass(frozen=True)
class LoopFailure:
    index: int
    error: BaseException
    item: Any
    timestamp: float


class LoopController:
    """Itera `start..bound` com cadência fixa, capturando falhas por item."""

    DEFAULT_MAX_ITEMS = DEFAULT_MAX_ITEMS

    def __init__(
        self,
        *,
        is_production: bool = False,
        max_items: int = DEFAULT_MAX_ITEMS,
        on_progress: Optional[Callable[[int, int, float], None]] = None,
        on_failure: Optional[Callable[[int, BaseException, Any], None]] = None,
        get_current_index: Optional[Callable[[], int]] = None,
        set_current_index: Optional[Callable[[int], None]] = None,
        wait: Optional[Callable[[float], Any]] = None,
    ):
        self.is_production = is_production
        self.max_items = max_items
        self.on_progress = on_progress
        self.on_failure = on_failure
        self.get_current_index = get_current_index
        self.set_current_index = set_current_index

        self._stop_event = threading.Event()
        self._wait = wait or self._stop_event.wait
        self._failures: List[LoopFailure] = []

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------
    def run(
        self,
        limit: int,
        process: Callable[[int, Sequence[Any]], Any],
        done: Callable[[Sequence[Any]], Any],
        delay: float = 1.0,
        start: int = 0,
        items: Optional[Sequence[Any]] = None,
    ) -> Tuple[LoopFailure, ...]:
        """
        Executa o loop até `bound` (inclusivo) ou até `stop()`.

        Um `stop()` emitido antes de `run` começar interrompe já o primeiro
        tick. O pedido de parada é consumido ao sair do loop.

        Args:
            limit: Último índice desejado.
            process: Chamado com `(index, items)` a cada tick.
            done: Chamado com `items` uma única vez ao final.
            delay: Espera em segundos antes de cada tick.
            start: Índice inicial quando não há retomada no lugar.
            items: Lista percorrida; o item da falha é `items[index]`.

        Returns:
            Tuple[LoopFailure, ...]: Falhas capturadas até o momento.
        """
        items = list(items) if items is not None else []

        bound = limit
        if not self.is_production and bound > self.max_items:
            bound = self.max_items

        index = start
        if self.get_current_index is not None:
            current = self.get_current_index()
            if current and current > 0:
                index = current
                logger.info("resuming in place from index %d", index)

        remaining = (bound - index + 2) * delay

        while index <= bound:
            self._wait(delay)
            if self._stop_event.is_set():
                logger.info("loop stopped before index %d", index)
                self._stop_event.clear()
                return tuple(self._failures)

            try:
                process(index, items)
            except Exception as exc:
                item = items[index] if 0 <= index < len(items) else None
                self._failures.append(LoopFailure(index=index, error=exc, item=item, timestamp=time.time()))
                logger.warning("item %d failed: %s", index, exc)
                if self.on_failure is not None:
                    self.on_failure(index, exc, item)
            else:
                if self.set_current_index is not None:
                    self.set_current_index(index + 1)
                remaining -= delay
                logger.info("left time is %s", format_duration(remaining))
                if self.on_progress is not None:
                    self.on_progress(index, bound, remaining)

            if self._stop_event.is_set():
                logger.info("loop stopped after index %d", index)
                self._stop_event.clear()
                return tuple(self._failures)
            index += 1

        if self.set_current_index is not None:
            self.set_current_index(0)
        done(items)
        self._stop_event.clear()
        return tuple(self._failures)

    def stop(self) -> None:
        self._stop_event.set()

    # ------------------------------------------------------------------
    # Failures
    # ------------------------------------------------------------------
    def get_failures(self) -> List[LoopFailure]:
        return list(self._failures)

    def clear_failures(self) -> None:
        self._failures.clear()

    def retry_queue(self) -> List[LoopFailure]:
        """Falhas pendentes, para uma nova passada por item conduzida pelo Step."""
        return self.get_failures()
