# model_compare/pipeline/parallel/executor.py
from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, Iterable, Tuple, Type

from model_compare.pipeline.parallel.types import ParallelKind, TaskResult
from model_compare.utils.errors import ComparisonError
from model_compare import logs


class ParallelExecutor:
    """
    ParallelExecutor

    - one task per key, keys are independent (no shared mutable state)
    - returns a partial-success map keyed like the input, in input order
    - exceptions listed in `exceptions` are captured per key;
      anything else propagates (fail fast)
    - threads, so handlers may close over sessions and fitted models
    """

    @staticmethod
    def run(
            *,
            kind: ParallelKind,
            items: Iterable[str],
            handler: Callable[[str], Any],
            max_workers: int | None = None,
            exceptions: Tuple[Type[BaseException], ...] = (ComparisonError,),
    ) -> Dict[str, TaskResult]:
        items = list(items)
        if not items:
            logs.info(f"[ParallelExecutor] kind={kind.value} no items to process")
            return {}

        logs.info(
            f"[ParallelExecutor] start "
            f"kind={kind.value} total={len(items)}"
        )

        workers = ParallelExecutor._resolve_workers(items, max_workers)

        if workers == 1:
            results = ParallelExecutor._run_sequential(items, handler, exceptions)
        else:
            results = ParallelExecutor._run_parallel(items, handler, workers, exceptions)

        failed = [k for k, r in results.items() if not r.ok]
        logs.info(
            f"[ParallelExecutor] done kind={kind.value} "
            f"ok={len(results) - len(failed)} failed={len(failed)}"
        )
        return results

    # ---------------- internal ----------------

    @staticmethod
    def _resolve_workers(items: list[str], max_workers: int | None) -> int:
        cpu = os.cpu_count() or 1
        if max_workers is None:
            return min(cpu, len(items))
        return max(1, min(max_workers, len(items)))

    @staticmethod
    def _call(
            item: str,
            handler: Callable[[str], Any],
            exceptions: Tuple[Type[BaseException], ...],
    ) -> TaskResult:
        try:
            return TaskResult(key=item, value=handler(item))
        except exceptions as e:
            return TaskResult(key=item, error=e)

    @staticmethod
    def _run_sequential(
            items: list[str],
            handler: Callable[[str], Any],
            exceptions: Tuple[Type[BaseException], ...],
    ) -> Dict[str, TaskResult]:
        return {
            item: ParallelExecutor._call(item, handler, exceptions)
            for item in items
        }

    @staticmethod
    def _run_parallel(
            items: list[str],
            handler: Callable[[str], Any],
            workers: int,
            exceptions: Tuple[Type[BaseException], ...],
    ) -> Dict[str, TaskResult]:
        logs.info(
            f"[ParallelExecutor] run parallel | workers={workers}"
        )

        done: Dict[str, TaskResult] = {}
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {
                pool.submit(ParallelExecutor._call, item, handler, exceptions): item
                for item in items
            }
            for fut in as_completed(futures):
                done[futures[fut]] = fut.result()

        # completion order is arbitrary; report in input order
        return {item: done[item] for item in items}
