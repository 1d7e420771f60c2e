"""
CSV 上传读取服务

文件类型校验 -> 一次性读取并解码 -> 空内容检查 -> 按表头解析成记录列表。
"""
import csv
import io
from typing import List, Optional

from fastapi import UploadFile
from loguru import logger
from starlette.requests import ClientDisconnect

from app.core.config import settings
from app.core.exceptions import (
    EmptyFileContentError,
    FileReadAbortedError,
    FileReadFailedError,
    FileTypeRejectedError,
    ParseFailureError,
)
from app.schemas.room import ReadResult, ReadStatus, Record

CSV_CONTENT_TYPE = "text/csv"
CSV_SUFFIX = ".csv"
# DictReader 放多余字段的 key，解析后丢弃
_EXTRA_KEY = "__parsed_extra"


def check_file_type(filename: Optional[str], content_type: Optional[str]) -> None:
    """MIME 是 text/csv 或文件名以 .csv 结尾，满足其一即可"""
    if not filename and not content_type:
        raise FileTypeRejectedError("请先选择一个文件")
    if content_type == CSV_CONTENT_TYPE:
        return
    if filename and filename.endswith(CSV_SUFFIX):
        return
    logger.warning(f"[上传] 拒绝非 CSV 文件: name={filename}, type={content_type}")
    raise FileTypeRejectedError()


def decode_content(raw: bytes, encoding: Optional[str] = None) -> str:
    encoding = encoding or settings.CSV_ENCODING
    try:
        return raw.decode(encoding)
    except UnicodeDecodeError as e:
        raise FileReadFailedError(f"编码错误: {e.reason} (位置 {e.start})")
    except LookupError:
        raise FileReadFailedError(f"不支持的编码: {encoding}")


def ensure_not_empty(text: Optional[str]) -> str:
    if not text or text.strip() == "":
        raise EmptyFileContentError()
    return text


async def read_upload(upload: UploadFile) -> ReadResult:
    """
    一次性读取上传文件

    不抛异常，返回三种结果之一：
    - success: text 为完整文本（可能为空串，由调用方检查）
    - error: detail 为带错误码的失败原因
    - aborted: 客户端在读取过程中断开
    """
    try:
        raw = await upload.read()
    except ClientDisconnect:
        logger.warning(f"[上传] 读取被中断: {upload.filename}")
        return ReadResult(status=ReadStatus.ABORTED)
    except OSError as e:
        detail = f"错误代码: {e.errno}, {e.strerror or e}"
        logger.error(f"[上传] 读取失败: {upload.filename}, {detail}")
        return ReadResult(status=ReadStatus.ERROR, detail=detail)

    if len(raw) > settings.UPLOAD_MAX_BYTES:
        detail = f"文件大小 {len(raw)} 字节超过上限 {settings.UPLOAD_MAX_BYTES} 字节"
        logger.warning(f"[上传] {detail}: {upload.filename}")
        return ReadResult(status=ReadStatus.ERROR, detail=detail)

    try:
        text = decode_content(raw)
    except FileReadFailedError as e:
        logger.warning(f"[上传] 解码失败: {upload.filename}, {e.detail}")
        return ReadResult(status=ReadStatus.ERROR, detail=e.detail)
    return ReadResult(status=ReadStatus.SUCCESS, text=text)


def unwrap_read_result(result: ReadResult) -> str:
    """把读取结果还原成非空文本，失败/中断/空内容时抛出对应异常"""
    if result.status == ReadStatus.ABORTED:
        raise FileReadAbortedError()
    if result.status == ReadStatus.ERROR:
        raise FileReadFailedError(result.detail or "无法读取文件")
    return ensure_not_empty(result.text)


def parse_records(text: str, delimiter: Optional[str] = None) -> List[Record]:
    """
    按首行表头解析 CSV

    空行跳过；行比表头短时缺失的列为 None；比表头长时多出的值丢弃。
    单个字段最长可到上传上限（csv 默认只有 128 KiB）
    """
    csv.field_size_limit(settings.UPLOAD_MAX_BYTES)
    reader = csv.DictReader(
        io.StringIO(text, newline=""),
        delimiter=delimiter or settings.CSV_DELIMITER,
        restkey=_EXTRA_KEY,
    )
    records: List[Record] = []
    extra_rows = 0
    try:
        for row in reader:
            if row.pop(_EXTRA_KEY, None) is not None:
                extra_rows += 1
            records.append(row)
    except csv.Error as e:
        # DictReader.line_num 只在成功读出一行后才更新，出错行号要看底层 reader
        raise ParseFailureError(f"第 {reader.reader.line_num} 行: {e}")
    if extra_rows:
        logger.warning(f"[上传] {extra_rows} 行字段数多于表头，多余字段已忽略")
    return records
