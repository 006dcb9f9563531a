from typing import Any

from pydantic import BaseModel


class ResponseCodes:
    # 通用响应码
    OK = (200, "OK")
    NOT_FOUND = (255, "请求的资源不存在")
    PARAMS_ERROR = (260, "请求参数错误")
    PERMISSION_DENIED = (310, "当前账号权限不足")
    # 判题响应码
    PROBLEM_NOT_FOUND = (700, "题目不存在")


class ArenaResponse(BaseModel):
    code: int
    message: str
    data: Any

    def __init__(self, message_tuple: tuple[int, str], *, data: Any = None):
        response_data = {
            "code": message_tuple[0],
            "message": message_tuple[1],
            "data": data,
        }
        super().__init__(**response_data)
