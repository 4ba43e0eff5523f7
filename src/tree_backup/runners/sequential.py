"""Sequential runner - Backs up files one at a time."""

import logging
from collections.abc import Callable
from pathlib import Path

from ..errors import BackupError, describe
from ..metadata import read_metadata
from ..models import BackupConfig, BackupReport, BackupType, ReportBuilder
from ..paths import ensure_directory, map_destination
from ..replicator import replicate_file
from ..scanner import scan_tree
from .base import RunnerCallbacks, RunState

logger = logging.getLogger(__name__)


class SequentialRunner:
    """
    Sequential backup runner.

    Setup is best-effort: a failure to prepare the destination or to
    enumerate the source is recorded and the run carries on with whatever
    it has. The copy loop is fail-fast: the first file that cannot be
    mapped, placed, copied or measured stops the run, and later files are
    not backed up.

    A callback that raises never aborts the run. The failure is recorded in
    the report, except for ``on_error`` and ``on_run_complete``, whose
    failures are only logged.

    Each run returns its own report; ``history`` keeps every report this
    runner has produced, oldest first.
    """

    def __init__(self):
        self.state = RunState.IDLE
        self.history: list[BackupReport] = []

    def run(self, config: BackupConfig, callbacks: RunnerCallbacks | None = None) -> BackupReport:
        """
        Execute a backup.

        Never raises; failures are reflected in the report.

        Args:
            config: Source, destination and backup type
            callbacks: Optional callbacks for progress reporting

        Returns:
            Finalized BackupReport
        """
        cb = callbacks or RunnerCallbacks()
        builder = ReportBuilder(config=config)
        self._set_state(RunState.IDLE, builder, cb)
        self._notify(cb.on_run_start, config, builder=builder)

        logger.info(
            f"Starting {config.backup_type.value} backup: {config.source_path} -> {config.destination_path}"
            + (" (dry run)" if config.dry_run else "")
        )

        if config.backup_type != BackupType.FULL:
            self._record(builder, cb, f"{config.backup_type.value} backup is not implemented")
        else:
            try:
                self._run_full(config, builder, cb)
            except Exception as e:
                logger.exception("Unexpected failure during backup")
                self._record(builder, cb, f"Unexpected error: {e}")

        return self._finalize(builder, cb)

    def _run_full(self, config: BackupConfig, builder: ReportBuilder, cb: RunnerCallbacks) -> None:
        self._set_state(RunState.DIRECTORY_PREP, builder, cb)
        self._prepare_destination(config, builder, cb)

        self._set_state(RunState.ENUMERATING, builder, cb)
        files = self._enumerate(config, builder, cb)

        self._set_state(RunState.COPYING_FILES, builder, cb)
        self._copy_files(files, config, builder, cb)

    def _prepare_destination(self, config: BackupConfig, builder: ReportBuilder, cb: RunnerCallbacks) -> None:
        if config.dry_run:
            logger.info(f"[DRY RUN] Would create {config.destination_path}")
            return

        try:
            ensure_directory(config.destination_path)
        except BackupError as e:
            self._record(builder, cb, describe(e))

    def _enumerate(self, config: BackupConfig, builder: ReportBuilder, cb: RunnerCallbacks) -> list[Path]:
        scan_result = scan_tree(config.source_path)

        if scan_result.error is not None:
            self._record(builder, cb, describe(scan_result.error))

        self._notify(cb.on_scan_complete, scan_result.total_files, len(scan_result.skipped), builder=builder)

        logger.info(f"Found {scan_result.total_files} files ({len(scan_result.skipped)} entries skipped)")
        return scan_result.files

    def _copy_files(
        self,
        files: list[Path],
        config: BackupConfig,
        builder: ReportBuilder,
        cb: RunnerCallbacks,
    ) -> None:
        total = len(files)

        for idx, file_path in enumerate(files, start=1):
            self._notify(cb.on_file_start, file_path, idx, total, builder=builder)

            try:
                dst = map_destination(config.source_path, config.destination_path, file_path)

                if config.dry_run:
                    logger.info(f"[DRY RUN] Would copy {file_path} -> {dst}")
                else:
                    ensure_directory(dst.parent)
                    replicate_file(
                        file_path,
                        dst,
                        atomic=config.atomic_writes,
                        chunk_size=config.chunk_size,
                    )

                size = read_metadata(file_path).size
            except (BackupError, OSError) as e:
                self._record(builder, cb, describe(e))
                logger.warning(f"Stopping at file {idx}/{total}; {total - idx} files not backed up")
                break

            builder.record_file(size)
            self._notify(cb.on_file_complete, file_path, size, idx, total, builder=builder)

    def _finalize(self, builder: ReportBuilder, cb: RunnerCallbacks) -> BackupReport:
        self._set_state(RunState.FINALIZED, builder, cb)
        report = builder.finalize()
        self.history.append(report)

        status = "succeeded" if report.success else "failed"
        logger.info(
            f"Backup {status}: {report.files_backed_up} files, "
            f"{report.total_size_bytes} bytes in {report.duration_display}"
        )

        self._notify(cb.on_run_complete, report)
        return report

    def _notify(self, callback: Callable | None, *args, builder: ReportBuilder | None = None) -> None:
        """Invoke an optional callback; with a builder, a failure is recorded as a run error."""
        if callback is None:
            return

        try:
            callback(*args)
        except Exception as e:
            logger.exception(f"Progress callback {getattr(callback, '__name__', callback)!s} failed")
            if builder is not None:
                builder.record_error(f"Callback error: {e}")

    def _record(self, builder: ReportBuilder, cb: RunnerCallbacks, message: str) -> None:
        builder.record_error(message)
        logger.error(message)
        self._notify(cb.on_error, self.state, message)

    def _set_state(self, state: RunState, builder: ReportBuilder, cb: RunnerCallbacks) -> None:
        self.state = state
        self._notify(cb.on_state_change, state, builder=builder)
