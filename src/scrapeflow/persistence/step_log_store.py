# src/scrapeflow/persistence/step_log_store.py
"""
Store persistente e retomável de progresso por (run, step).

Layout em disco:
    <log_dir>/<run_id>-<step_id>.json

    {
      "stepId": "collect",
      "index": 10,
      "fails": [3, "page-7"],
      "updatedAt": "2026-01-01T00:00:00.000000+00:00",
      "payload": {...}            # opcional
    }

Regras:
    - `index == 0` significa "não está em progresso" (concluído/resetado)
    - `fails` é append-only e ordenado; só é limpo quando `index` volta a 0
    - registros são criados sob demanda com `index=0, fails=[]`
    - escrita atômica (arquivo temporário + `os.replace`)
    - dado malformado é tratado como ausente; outros `OSError` propagam

Política de persistência:
    Com `persist_in_production_only=True` e fora de produção, escritas
    são no-ops e leituras devolvem valores padrão.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from scrapeflow.core.pipeline.types import StepStatus

logger = logging.getLogger(__name__)

FailureId = Union[int, str]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StepLogRecord:
    step_id: str
    index: int = 0
    fails: List[FailureId] = field(default_factory=list)
    updated_at: str = ""
    payload: Optional[Dict[str, Any]] = None

    @property
    def status(self) -> StepStatus:
        if self.fails:
            return StepStatus.FAILED
        if self.index > 0:
            return StepStatus.IN_PROGRESS
        return StepStatus.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "stepId": self.step_id,
            "index": self.index,
            "fails": list(self.fails),
            "updatedAt": self.updated_at,
        }
        if self.payload is not None:
            out["payload"] = self.payload
        return out

    @classmethod
    def from_dict(cls, data: Any) -> Optional["StepLogRecord"]:
        """Converte o corpo JSON; devolve None quando o formato é inválido."""
        if not isinstance(data, dict):
            return None
        step_id = data.get("stepId")
        index = data.get("index")
        fails = data.get("fails")
        updated_at = data.get("updatedAt")
        payload = data.get("payload")
        if not isinstance(step_id, str) or not step_id:
            return None
        if isinstance(index, bool) or not isinstance(index, int) or index < 0:
            return None
        if not isinstance(fails, list) or any(
            isinstance(f, bool) or not isinstance(f, (int, str)) for f in fails
        ):
            return None
        if not isinstance(updated_at, str):
            return None
        if payload is not None and not isinstance(payload, dict):
            return None
        return cls(step_id=step_id, index=index, fails=list(fails), updated_at=updated_at, payload=payload)


@dataclass(frozen=True)
class ResumeState:
    current_step_id: str = ""
    step_index: int = 0
    completed_step_ids: List[str] = field(default_factory=list)
    failed_step_ids: List[str] = field(default_factory=list)
    payload: Dict[str, Any] = field(default_factory=dict)


class StepLogStore:
    """Persistência de progresso de Steps, um arquivo JSON por (run, step)."""

    def __init__(
        self,
        log_dir: Union[str, os.PathLike] = "./logs",
        run_id: Optional[str] = None,
        *,
        persist_in_production_only: bool = True,
        is_production: bool = False,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._clock = clock or _utcnow
        self.log_dir = os.path.abspath(os.fspath(log_dir))
        self.run_id = run_id or f"run-{int(self._clock().timestamp() * 1000)}"
        self.persist_in_production_only = persist_in_production_only
        self.is_production = is_production

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def set_progress(self, step_id: str, index: int) -> None:
        if not self._should_persist():
            return
        record = self._read(step_id) or self._default(step_id)
        record.index = index
        if index == 0:
            record.fails = []
        record.updated_at = self._timestamp()
        self._write(record)

    def record_failure(self, step_id: str, failure_id: FailureId) -> None:
        if not self._should_persist():
            return
        record = self._read(step_id) or self._default(step_id)
        record.fails = [*record.fails, failure_id]
        record.updated_at = self._timestamp()
        self._write(record)

    def set_payload(self, step_id: str, payload: Dict[str, Any]) -> None:
        if not self._should_persist():
            return
        record = self._read(step_id) or self._default(step_id)
        record.payload = {**(record.payload or {}), **payload}
        record.updated_at = self._timestamp()
        self._write(record)

    def clear_step(self, step_id: str) -> None:
        if not self._should_persist():
            return
        self._remove(self._path(step_id))

    def clear_run(self) -> None:
        if not self._should_persist():
            return
        for name in self._run_files():
            self._remove(os.path.join(self.log_dir, name))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_record(self, step_id: str) -> StepLogRecord:
        if not self._should_persist():
            return self._default(step_id)
        return self._read(step_id) or self._default(step_id)

    def get_all_records(self) -> List[StepLogRecord]:
        if not self._should_persist():
            return []
        records: List[StepLogRecord] = []
        for name in self._run_files():
            record = self._load(os.path.join(self.log_dir, name))
            if record is None:
                continue
            if name != self._file_name(record.step_id):
                # arquivo de outra run cujo id compartilha o prefixo
                continue
            records.append(record)
        return sorted(records, key=lambda r: r.updated_at)

    def build_resume_state(self, current_step_id: Optional[str] = None) -> ResumeState:
        records = self.get_all_records()

        current = current_step_id
        if current is None:
            in_progress = [r for r in records if r.index > 0]
            if in_progress:
                current = in_progress[-1].step_id
            elif records:
                current = records[-1].step_id
            else:
                current = ""

        step_index = next((r.index for r in records if r.step_id == current), 0)
        return ResumeState(
            current_step_id=current,
            step_index=step_index,
            completed_step_ids=[r.step_id for r in records if r.index == 0],
            failed_step_ids=[r.step_id for r in records if r.fails],
            payload={r.step_id: r.payload for r in records if r.payload is not None},
        )

    def resume_state_for(
        self, ordered_step_ids: Sequence[str], current_step_id: Optional[str] = None
    ) -> ResumeState:
        """Snapshot com `step_index` expresso como posição do Step na ordem dada."""
        state = self.build_resume_state(current_step_id)
        ordered = list(ordered_step_ids)
        position = ordered.index(state.current_step_id) if state.current_step_id in ordered else 0
        return ResumeState(
            current_step_id=state.current_step_id,
            step_index=position,
            completed_step_ids=state.completed_step_ids,
            failed_step_ids=state.failed_step_ids,
            payload=state.payload,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _should_persist(self) -> bool:
        if not self.persist_in_production_only:
            return True
        return self.is_production

    def _timestamp(self) -> str:
        return self._clock().isoformat()

    def _default(self, step_id: str) -> StepLogRecord:
        return StepLogRecord(step_id=step_id, index=0, fails=[], updated_at=self._timestamp())

    def _file_name(self, step_id: str) -> str:
        return f"{self.run_id}-{step_id}.json"

    def _path(self, step_id: str) -> str:
        return os.path.join(self.log_dir, self._file_name(step_id))

    def _run_files(self) -> List[str]:
        try:
            names = os.listdir(self.log_dir)
        except FileNotFoundError:
            return []
        prefix = f"{self.run_id}-"
        return sorted(n for n in names if n.startswith(prefix) and n.endswith(".json"))

    def _read(self, step_id: str) -> Optional[StepLogRecord]:
        record = self._load(self._path(step_id))
        if record is not None and record.step_id != step_id:
            return None
        return record

    def _load(self, path: str) -> Optional[StepLogRecord]:
        try:
            with open(path, "rb") as f:
                raw = f.read()
        except FileNotFoundError:
            return None
        try:
            data = json.loads(raw.decode("utf-8"))
        except ValueError:
            logger.warning("registro malformado ignorado: %s", path)
            return None
        record = StepLogRecord.from_dict(data)
        if record is None:
            logger.warning("registro com campos inválidos ignorado: %s", path)
        return record

    def _write(self, record: StepLogRecord) -> None:
        os.makedirs(self.log_dir, exist_ok=True)
        path = self._path(record.step_id)
        fd, tmp_path = tempfile.mkstemp(dir=self.log_dir, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(record.to_dict(), f, indent=2)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        logger.debug("step log %s: index=%d fails=%d", record.step_id, record.index, len(record.fails))

    @staticmethod
    def _remove(path: str) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
