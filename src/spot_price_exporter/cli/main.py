"""
CLI メインモジュール

spot-exporter コマンドのエントリーポイント。
"""

import logging
import sys
from datetime import datetime, timezone

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from spot_price_exporter.core import (
    ExportError,
    FileCheckpointStore,
    SqliteSpotPriceSink,
    settings,
)
from spot_price_exporter.ingest import EntsoeClient, SpotPriceExporter

console = Console()


def setup_logging(level: str = "INFO") -> None:
    """ログ設定"""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


@click.group()
@click.option("--debug", is_flag=True, help="デバッグモードを有効化")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """前日市場価格エクスポータ CLI"""
    ctx.ensure_object(dict)
    log_level = "DEBUG" if debug else settings.log_level
    setup_logging(log_level)


# =============================================================================
# run コマンド
# =============================================================================


@cli.command()
@click.option(
    "--date",
    "target_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="取得対象日 (YYYY-MM-DD、UTC)。省略時は現在日",
)
@click.option("--dry-run", is_flag=True, help="書き込みとチェックポイント保存をスキップ")
def run(target_date: datetime | None, dry_run: bool) -> None:
    """1日分の前日市場価格を取得して保存"""
    now = datetime.now(timezone.utc)
    start_date = target_date.replace(tzinfo=timezone.utc) if target_date else now

    try:
        if dry_run:
            console.print("[yellow]ドライラン モード[/yellow]")

        with EntsoeClient.from_settings(settings) as client:
            exporter = SpotPriceExporter(
                market_data=client,
                sink=SqliteSpotPriceSink(settings.database_url),
                checkpoint_store=FileCheckpointStore(settings.checkpoint_path),
            )
            result = exporter.run(start_date, now=now, dry_run=dry_run)

        table = Table(title="エクスポート結果")
        table.add_column("項目", style="cyan")
        table.add_column("値", justify="right")
        table.add_row("期間", f"{result.period_start:%Y-%m-%d %H:%M} 〜 {result.period_end:%Y-%m-%d %H:%M}")
        table.add_row("取得", str(result.fetched))
        table.add_row("書き込み", f"[green]{result.written}[/green]")
        table.add_row("スキップ", f"[yellow]{result.skipped}[/yellow]")
        table.add_row("既存（書き込みなし）", str(result.duplicates))
        table.add_row("未経過", str(result.future))
        table.add_row(
            "最終区間",
            result.last_from.isoformat() if result.last_from else "-",
        )
        table.add_row("チェックポイント更新", "はい" if result.checkpoint_written else "いいえ")

        console.print(table)

    except (ExportError, ValueError) as e:
        console.print(f"[red]エラー:[/red] {e}")
        sys.exit(1)


# =============================================================================
# db コマンドグループ
# =============================================================================


@cli.group()
def db() -> None:
    """分析ストア管理"""
    pass


@db.command("init")
def db_init() -> None:
    """テーブルを初期化"""
    try:
        SqliteSpotPriceSink(settings.database_url).init_table()
    except ExportError as e:
        console.print(f"[red]エラー:[/red] {e}")
        sys.exit(1)
    console.print("[green]✓[/green] テーブルを初期化しました")


@db.command("stats")
def db_stats() -> None:
    """分析ストアの統計情報を表示"""
    try:
        sink = SqliteSpotPriceSink(settings.database_url)
        count = sink.count_rows()
        latest = sink.latest_from()

        table = Table(title="分析ストア統計")
        table.add_column("項目", style="cyan")
        table.add_column("値", justify="right", style="green")
        table.add_row("spot_prices", str(count))
        table.add_row("最新区間", latest.isoformat() if latest else "-")

        console.print(table)
    except Exception as e:
        console.print(f"[red]エラー:[/red] {e}")
        console.print("[yellow]ヒント:[/yellow] `spot-exporter db init` を実行してください")
        sys.exit(1)


# =============================================================================
# checkpoint コマンドグループ
# =============================================================================


@cli.group()
def checkpoint() -> None:
    """チェックポイント管理"""
    pass


@checkpoint.command("show")
def checkpoint_show() -> None:
    """保存されているチェックポイントを表示"""
    try:
        state = FileCheckpointStore(settings.checkpoint_path).read()
    except ExportError as e:
        console.print(f"[red]エラー:[/red] {e}")
        sys.exit(1)

    if state is None:
        console.print("[yellow]チェックポイントはまだありません[/yellow]")
        return

    console.print(f"最終書き込み区間: [cyan]{state.last_from.isoformat()}[/cyan]")

    table = Table(title="未経過の価格区間")
    table.add_column("from", style="cyan")
    table.add_column("till", style="cyan")
    table.add_column("marketPrice", justify="right", style="green")
    for interval in state.future_spot_prices:
        table.add_row(
            interval.from_.isoformat(),
            interval.till.isoformat(),
            f"{interval.market_price:.5f}",
        )
    console.print(table)


# =============================================================================
# エントリーポイント
# =============================================================================


def main() -> None:
    """CLIエントリーポイント"""
    cli()


if __name__ == "__main__":
    main()
