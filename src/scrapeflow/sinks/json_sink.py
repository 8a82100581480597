# src/scrapeflow/sinks/json_sink.py
"""
Sink que grava o payload como arquivo JSON.

Nome do arquivo, por ordem de precedência:
    1. `file_name_builder(payload, ctx)` quando fornecido e não vazio
    2. `file_name` estático
    3. `<run_id>-<timestamp>`

`.json` é acrescentado quando ausente. A escrita é atômica
(arquivo temporário + `os.replace`).
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Union

logger = logging.getLogger(__name__)


class JsonSink:
    id = "json-sink"

    def __init__(
        self,
        output_dir: Union[str, os.PathLike] = "./data",
        file_name: Optional[str] = None,
        file_name_builder: Optional[Callable[[Any, Any], Optional[str]]] = None,
        calculate_item_count: bool = True,
        success_message: str = "inserted successfully",
        indent: Optional[int] = 2,
    ):
        self.output_dir = os.path.abspath(os.fspath(output_dir))
        self.file_name = file_name
        self.file_name_builder = file_name_builder
        self.calculate_item_count = calculate_item_count
        self.success_message = success_message
        self.indent = indent

    def write(self, payload: Any, ctx: Any) -> str:
        """Grava `payload` e devolve o caminho absoluto do arquivo."""
        path = self.build_file_path(payload, ctx)
        os.makedirs(os.path.dirname(path), exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=os.path.dirname(path), prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=self.indent, ensure_ascii=False)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        if self.success_message:
            count = ""
            if self.calculate_item_count and isinstance(payload, list):
                count = f", Saved Items Count {len(payload)}"
            logger.info("%s%s -> %s", self.success_message, count, path)
        return path

    def flush(self, ctx: Any) -> None:
        return None

    def build_file_path(self, payload: Any, ctx: Any) -> str:
        name = None
        if self.file_name_builder is not None:
            name = self.file_name_builder(payload, ctx)
        if not name:
            name = self.file_name or self._default_file_name(ctx)
        if not name.endswith(".json"):
            name = f"{name}.json"
        return os.path.join(self.output_dir, name)

    @staticmethod
    def _default_file_name(ctx: Any) -> str:
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%fZ")
        return f"{getattr(ctx, 'run_id', 'run')}-{stamp}"
