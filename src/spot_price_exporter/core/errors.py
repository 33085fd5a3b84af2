"""
エラー定義モジュール

エクスポート処理で発生するエラーを種別ごとに定義する。
リトライ可能かどうかは種別で決まり、メッセージ文字列を調べる必要はない。
"""

from enum import Enum


class ErrorKind(str, Enum):
    """エラー種別"""

    FETCH_FAILED = "fetch_failed"
    UNKNOWN_RESOLUTION = "unknown_resolution"
    PARSE_FAILED = "parse_failed"
    SINK_WRITE_FAILED = "sink_write_failed"
    CHECKPOINT_IO_FAILED = "checkpoint_io_failed"


# 一時的なI/O障害としてリトライ対象にする種別
RETRYABLE_KINDS = frozenset({
    ErrorKind.FETCH_FAILED,
    ErrorKind.SINK_WRITE_FAILED,
    ErrorKind.CHECKPOINT_IO_FAILED,
})


class ExportError(Exception):
    """エクスポートエラー（基底クラス）"""

    kind: ErrorKind

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause

    @property
    def retryable(self) -> bool:
        return self.kind in RETRYABLE_KINDS


class FetchFailed(ExportError):
    """市場データ取得エラー"""

    kind = ErrorKind.FETCH_FAILED

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, cause=cause)
        self.status_code = status_code
        self.body = body


class UnknownResolution(ExportError):
    """未対応の解像度コード"""

    kind = ErrorKind.UNKNOWN_RESOLUTION

    def __init__(self, resolution: str):
        super().__init__(f"Unknown resolution {resolution}")
        self.resolution = resolution


class ParseFailed(ExportError):
    """XML・数値・日時・JSONのパースエラー"""

    kind = ErrorKind.PARSE_FAILED


class SinkWriteFailed(ExportError):
    """分析ストアへの書き込みエラー"""

    kind = ErrorKind.SINK_WRITE_FAILED


class CheckpointIOFailed(ExportError):
    """チェックポイントの読み書きエラー"""

    kind = ErrorKind.CHECKPOINT_IO_FAILED
