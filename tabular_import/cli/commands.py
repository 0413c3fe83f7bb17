from __future__ import annotations

import argparse
import json
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Any

import psycopg2
from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from ..logging.init import log_summary, setup_logging
from ..models.config_models import DatabaseConfig, ImportConfig
from ..services.export_service import NoDataToExportError, WorkbookExporter
from ..services.import_session import ImportSession
from ..services.orchestrator import process_files
from ..services.remote import DryRunRowSubmitter, PostgresRecordSource, PostgresRowSubmitter
from ..services.summary import render_summary_line

"""CLI entrypoint.

    python -m tabular_import.cli [--config PATH] [--debug] preview FILE [--rows N] [--json]
    python -m tabular_import.cli [--config PATH] [--debug] import FILE... [--object NAME] [--dry-run]
    python -m tabular_import.cli [--config PATH] [--debug] export [--output PATH]

Exit codes: 0 = all files ok, 2 = at least one file failed, 1 = fatal
(config error, database unreachable, nothing to export).
"""

__all__ = [
    "EXIT_FATAL",
    "EXIT_PARTIAL_FAILURE",
    "EXIT_SUCCESS_ALL",
    "main",
]

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _resolve_dsn(db_cfg: DatabaseConfig) -> str:
    """Resolve connection settings.

    優先順位:
        1. `.env` で読み込まれた環境変数 (main() 冒頭で上書き読み込み済み)
        2. 既存の環境変数: DATABASE_URL / PGDSN、個別 PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
        3. config の database セクション (不足分のフォールバック)
    """
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def _db_connection(cfg: ImportConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper)
    """Provide a psycopg2 cursor; transactions are issued explicitly by the submitter."""
    conn = psycopg2.connect(_resolve_dsn(cfg.database))
    conn.autocommit = True
    try:
        with conn.cursor() as cur:
            yield cur
    finally:
        conn.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env so that its connection settings win over the config file."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="tabular_import", description="CSV / Excel import preview, submission and workbook export"
    )
    p.add_argument("--config", type=Path, default=None, help=f"Config file (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    pv = sub.add_parser("preview", help="Show the preview grid of a file")
    pv.add_argument("file", type=Path)
    pv.add_argument("--rows", type=int, default=None, help="Row cap (default: config row_cap)")
    pv.add_argument("--json", action="store_true", help="Print headers and rows as JSON")

    im = sub.add_parser("import", help="Preview and submit one or more files")
    im.add_argument("files", type=Path, nargs="+")
    im.add_argument("--object", dest="target_object", default=None, help="Target object (table) name")
    im.add_argument("--dry-run", action="store_true", help="Validate and count rows without a database")

    ex = sub.add_parser("export", help="Export employee and account records to a workbook")
    ex.add_argument("--output", type=Path, default=None, help="Output workbook path")
    return p.parse_args(argv)


def _load_settings(path: Path | None) -> ImportConfig:
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return ImportConfig()
        path = DEFAULT_CONFIG_PATH
    return load_config(path)


def _cmd_preview(cfg: ImportConfig, args: argparse.Namespace, logger) -> int:
    if args.rows is not None:
        if args.rows < 0:
            logger.error("--rows must be >= 0")
            return EXIT_FATAL
        cfg = replace(cfg, row_cap=args.rows)
    session = ImportSession(config=cfg)
    ok = session.load_path(args.file)
    if args.json:
        out = session.preview.to_dict()
        out["message"] = session.message
        print(json.dumps(out, ensure_ascii=False, default=str))
    else:
        if session.headers:
            print("\t".join(str(h) for h in session.headers))
        for row in session.preview_rows:
            print("\t".join(str(c.value) for c in row.cells))
    if ok:
        logger.info(session.message)
        return EXIT_SUCCESS_ALL
    logger.error(session.message)
    return EXIT_PARTIAL_FAILURE


def _cmd_import(cfg: ImportConfig, args: argparse.Namespace, logger) -> int:
    target = args.target_object or cfg.target_object
    if args.dry_run:
        logger.info(f"mode=dry-run object={target}")
        result = process_files(args.files, cfg, DryRunRowSubmitter(), target_object=target)
    else:
        try:
            with _db_connection(cfg) as cur:
                logger.info(f"mode=live object={target}")
                result = process_files(args.files, cfg, PostgresRowSubmitter(cur), target_object=target)
        except psycopg2.Error as e:
            logger.error(f"database: {e}".strip())
            return EXIT_FATAL

    log_summary(render_summary_line(result)[len("SUMMARY "):])
    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def _cmd_export(cfg: ImportConfig, args: argparse.Namespace, logger) -> int:
    output = args.output or Path(cfg.export.output_file)
    try:
        with _db_connection(cfg) as cur:
            exporter = WorkbookExporter(PostgresRecordSource(cur, cfg.export.entities), entities=cfg.export.entities)
            exporter.load()
    except psycopg2.Error as e:
        logger.error(f"database: {e}".strip())
        return EXIT_FATAL
    try:
        path = exporter.export(output)
    except NoDataToExportError as e:
        logger.error(str(e))
        return EXIT_FATAL
    logger.info(f"workbook written: {path}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    # None のときのみシステム引数を読む ([] はそのまま使う)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = _load_settings(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "preview":
        return _cmd_preview(cfg, args, logger)
    if args.command == "import":
        return _cmd_import(cfg, args, logger)
    return _cmd_export(cfg, args, logger)
