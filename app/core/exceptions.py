"""上传与数据集加载相关的业务异常

所有异常只携带一条给用户看的提示语，上层统一捕获 DashboardError 后原样展示。
"""


class DashboardError(Exception):
    """看板异常基类（可用于批量捕获）"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FileTypeRejectedError(DashboardError):
    """文件既不是 .csv 后缀也不是 text/csv 类型"""

    def __init__(self, message: str = "请上传CSV文件"):
        super().__init__(message)


class FileReadFailedError(DashboardError):
    """底层读取失败，message 中带上平台错误码"""

    def __init__(self, detail: str = "无法读取文件", message: str = "读取文件失败"):
        self.detail = detail
        super().__init__(f"{message}: {detail}")


class FileReadAbortedError(DashboardError):
    def __init__(self, message: str = "文件读取被中断"):
        super().__init__(message)


class EmptyFileContentError(DashboardError):
    def __init__(self, message: str = "文件内容为空"):
        super().__init__(message)


class EmptyParsedDatasetError(DashboardError):
    """解析后没有任何数据行"""

    def __init__(self, message: str = "CSV文件为空或没有有效数据"):
        super().__init__(message)


class MissingRequiredFieldError(DashboardError):
    """第一行数据缺少必填字段"""

    def __init__(self, field: str = "room_id", message: str = "CSV文件中没有找到{field}字段"):
        self.field = field
        super().__init__(message.format(field=field))


class ParseFailureError(DashboardError):
    """CSV 解析器报告结构性错误"""

    def __init__(self, detail: str, message: str = "CSV解析失败"):
        self.detail = detail
        super().__init__(f"{message}: {detail}")


UPLOAD_EXCEPTIONS = (
    FileTypeRejectedError,
    FileReadFailedError,
    FileReadAbortedError,
    EmptyFileContentError,
)

DATASET_EXCEPTIONS = (
    EmptyParsedDatasetError,
    MissingRequiredFieldError,
    ParseFailureError,
)

__all__ = ["DashboardError"] + [e.__name__ for e in UPLOAD_EXCEPTIONS + DATASET_EXCEPTIONS]
