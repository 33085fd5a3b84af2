"""
チェックポイント管理モジュール

前回実行の状態（最後に書き込んだ区間と未経過の区間）を保存・読み込みする。
"""

import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from spot_price_exporter.core.config import settings
from spot_price_exporter.core.errors import CheckpointIOFailed, ParseFailed
from spot_price_exporter.core.models import Checkpoint

logger = logging.getLogger(__name__)


def dump_checkpoint(checkpoint: Checkpoint) -> str:
    """チェックポイントをJSON文字列に変換"""
    return checkpoint.model_dump_json(by_alias=True, indent=2)


def load_checkpoint(content: str | bytes) -> Checkpoint:
    """
    JSON文字列からチェックポイントを復元

    Raises:
        ParseFailed: 内容が不正な場合
    """
    try:
        return Checkpoint.model_validate_json(content)
    except ValidationError as e:
        raise ParseFailed(f"チェックポイントのパースエラー: {e}", cause=e) from e


class FileCheckpointStore:
    """JSONファイルによるチェックポイントストア"""

    def __init__(self, path: Path | str = settings.checkpoint_path):
        self.path = Path(path)

    def read(self) -> Checkpoint | None:
        """チェックポイントを読み込む（未作成の場合None）"""
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info(f"チェックポイントがありません（初回実行）: {self.path}")
            return None
        except UnicodeDecodeError as e:
            raise ParseFailed(f"チェックポイントがUTF-8ではありません: {e}", cause=e) from e
        except OSError as e:
            raise CheckpointIOFailed(f"チェックポイント読み込みエラー: {e}", cause=e) from e

        return load_checkpoint(content)

    def write(self, checkpoint: Checkpoint) -> None:
        """チェックポイントを全体置換で書き込む"""
        content = dump_checkpoint(checkpoint)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # 同一ディレクトリの一時ファイルに書いてから置換する
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(content)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise CheckpointIOFailed(f"チェックポイント書き込みエラー: {e}", cause=e) from e

        logger.debug(f"チェックポイント保存完了: {self.path}")


class InMemoryCheckpointStore:
    """メモリ上のチェックポイントストア"""

    def __init__(self, checkpoint: Checkpoint | None = None):
        self.checkpoint = checkpoint
        self.writes = 0

    def read(self) -> Checkpoint | None:
        return self.checkpoint

    def write(self, checkpoint: Checkpoint) -> None:
        self.checkpoint = checkpoint
        self.writes += 1
