"""项目内使用的自定义异常定义。

文件系统层面的故障（不存在、无权限、创建目录失败等）不会被包装，
直接以内置的 ``OSError`` 家族向上抛出。
"""


class SrcDstError(Exception):
    """基础异常类型。"""


class InvalidConfigurationError(SrcDstError):
    """配置不合法时抛出。"""


class UnsupportedOperationError(SrcDstError):
    """端点不支持该操作（例如对标准输出重命名或删除）。

    调用方应将其视为“无需处理”的分支，而不是错误。
    """


class HandleStateError(SrcDstError):
    """句柄状态不允许该操作（例如写入器已打开后再重命名）。"""
